"""CaptureSession aggregate - the state of one GIF capture run."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from gifcapture.core.entities.captured_frame import CapturedFrame
from gifcapture.core.value_objects.frame_schedule import FrameSchedule

EXTRACTION_SEEK_VERIFIED = "seek-verified"
EXTRACTION_INSTANT_FALLBACK = "instant-fallback"


@dataclass(frozen=True)
class PlaybackState:
    """Where the source was, and whether it was playing, before capture."""

    position: float
    paused: bool


@dataclass
class CaptureSession:
    """Created at session start, mutated only by the capture loop."""

    schedule: FrameSchedule
    original_playback_state: Optional[PlaybackState] = None
    id: str = field(default_factory=lambda: f"gif_{uuid.uuid4().hex[:12]}")
    frames: list[CapturedFrame] = field(default_factory=list)
    consecutive_duplicate_count: int = 0
    extraction_method: str = EXTRACTION_SEEK_VERIFIED
    started_at: datetime = field(default_factory=datetime.utcnow)

    def append(self, frame: CapturedFrame) -> None:
        if frame.index != len(self.frames):
            raise ValueError(
                f"Frame {frame.index} appended out of order (expected {len(self.frames)})"
            )
        self.frames.append(frame)

    def reset_frames(self, extraction_method: str) -> None:
        """Discard captured frames before another capture strategy takes over."""
        self.frames.clear()
        self.consecutive_duplicate_count = 0
        self.extraction_method = extraction_method

    @property
    def last_frame(self) -> Optional[CapturedFrame]:
        return self.frames[-1] if self.frames else None

    @property
    def duplicate_count(self) -> int:
        return sum(1 for f in self.frames if f.is_duplicate)

    def actual_frame_rate(self, duration: float) -> float:
        """Frames captured per second of the requested segment."""
        return len(self.frames) / duration if duration > 0 else 0.0
