"""
Frame scheduling - pure domain logic.
Turns a capture request and the source's intrinsic size into a FrameSchedule.
"""
from __future__ import annotations

import math

from gifcapture.core.entities.capture_request import CaptureRequest
from gifcapture.core.exceptions import InvalidRequestError
from gifcapture.core.value_objects.frame_schedule import FrameSchedule

ASPECT_TOLERANCE = 0.02


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round()`` is banker's rounding)."""
    return int(math.floor(value + 0.5))


def floor_even(value: int) -> int:
    return value - (value % 2)


class FrameScheduler:
    """Computes target timestamps and even, aspect-preserving output dimensions."""

    def __init__(self, aspect_tolerance: float = ASPECT_TOLERANCE) -> None:
        self._aspect_tolerance = aspect_tolerance

    def schedule(self, request: CaptureRequest, source_width: int, source_height: int) -> FrameSchedule:
        request.validate()
        if source_width <= 0 or source_height <= 0:
            raise InvalidRequestError(
                f"Source dimensions must be positive, got {source_width}x{source_height}"
            )

        frame_count = request.expected_frame_count
        frame_interval = request.duration / frame_count
        width, height = self.output_dimensions(
            source_width, source_height, request.target_width, request.target_height,
        )
        return FrameSchedule(
            frame_count=frame_count,
            frame_interval=frame_interval,
            output_width=width,
            output_height=height,
            start_time=request.start_time,
        )

    def output_dimensions(
        self,
        source_width: int,
        source_height: int,
        target_width: int,
        target_height: int,
    ) -> tuple[int, int]:
        """Fit the target box to the source aspect ratio unless they already agree."""
        if target_width <= 0 or target_height <= 0:
            raise InvalidRequestError(
                f"Target dimensions must be positive, got {target_width}x{target_height}"
            )
        source_aspect = source_width / source_height
        target_aspect = target_width / target_height

        if abs(source_aspect - target_aspect) / source_aspect <= self._aspect_tolerance:
            width, height = target_width, target_height
        elif source_aspect > target_aspect:
            width = target_width
            height = round_half_up(width / source_aspect)
        else:
            height = target_height
            width = round_half_up(height * source_aspect)

        width, height = floor_even(width), floor_even(height)
        if width <= 0 or height <= 0:
            raise InvalidRequestError(
                f"Output dimensions collapse to {width}x{height} for a "
                f"{source_width}x{source_height} source"
            )
        return width, height
