"""TimeRange value object representing the captured segment of a video."""

from __future__ import annotations

from dataclasses import dataclass

from gifcapture.core.exceptions import InvalidRequestError


@dataclass(frozen=True)
class TimeRange:
    """Immutable time range with start and end in seconds."""

    start_seconds: float
    end_seconds: float

    def __post_init__(self) -> None:
        if self.start_seconds < 0:
            raise InvalidRequestError(
                f"start_time ({self.start_seconds}) must not be negative"
            )
        if self.end_seconds <= self.start_seconds:
            raise InvalidRequestError(
                f"end_time ({self.end_seconds}) must be greater than start_time ({self.start_seconds})"
            )

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    def contains(self, timestamp: float) -> bool:
        return self.start_seconds <= timestamp <= self.end_seconds

    def clamp(self, timestamp: float) -> float:
        return min(max(timestamp, self.start_seconds), self.end_seconds)
