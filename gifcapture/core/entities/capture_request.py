"""CaptureRequest entity - what the caller wants turned into a GIF."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from gifcapture.core.exceptions import InvalidRequestError
from gifcapture.core.value_objects.text_overlay import TextOverlay
from gifcapture.core.value_objects.time_range import TimeRange

QUALITY_LEVELS = ("low", "medium", "high")


@dataclass
class CaptureRequest:
    """Segment, rate, size and overlays for one capture session."""

    start_time: float
    end_time: float
    frame_rate: float = 5.0
    target_width: int = 480
    target_height: int = 270
    quality: str = "medium"
    text_overlays: list[TextOverlay] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start_seconds=self.start_time, end_seconds=self.end_time)

    @property
    def expected_frame_count(self) -> int:
        return math.ceil(self.duration * self.frame_rate)

    def validate(self) -> None:
        """Reject inputs that cannot produce a frame schedule."""
        for name in ("start_time", "end_time", "frame_rate"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidRequestError(f"{name} must be a finite number, got {value!r}")
        # TimeRange rejects negative and empty segments
        self.time_range
        if self.frame_rate <= 0:
            raise InvalidRequestError(f"frame_rate must be positive, got {self.frame_rate}")
        if self.target_width <= 0 or self.target_height <= 0:
            raise InvalidRequestError(
                f"target dimensions must be positive, got {self.target_width}x{self.target_height}"
            )
        if self.quality not in QUALITY_LEVELS:
            raise InvalidRequestError(
                f"quality must be one of {', '.join(QUALITY_LEVELS)}, got {self.quality!r}"
            )

    @property
    def has_overlays(self) -> bool:
        return any(overlay.text for overlay in self.text_overlays)
