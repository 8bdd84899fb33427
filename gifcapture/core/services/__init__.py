from gifcapture.core.services.duplicate_detector import (
    DuplicateDetector,
    duplicate_bound,
    frame_similarity,
)
from gifcapture.core.services.frame_scheduler import FrameScheduler, floor_even, round_half_up

__all__ = [
    "FrameScheduler", "round_half_up", "floor_even",
    "DuplicateDetector", "frame_similarity", "duplicate_bound",
]
