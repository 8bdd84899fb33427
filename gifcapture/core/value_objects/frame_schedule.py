"""FrameSchedule value object: when to capture and at what size."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FrameSchedule:
    """Derived once per capture session by the frame scheduler."""

    frame_count: int
    frame_interval: float
    output_width: int
    output_height: int
    start_time: float = 0.0

    @property
    def duration(self) -> float:
        return self.frame_count * self.frame_interval

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def target_timestamp(self, index: int) -> float:
        if not 0 <= index < self.frame_count:
            raise IndexError(f"Frame index {index} outside schedule of {self.frame_count} frames")
        return self.start_time + index * self.frame_interval

    def timestamps(self) -> list[float]:
        return [self.start_time + i * self.frame_interval for i in range(self.frame_count)]

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.output_width, self.output_height
