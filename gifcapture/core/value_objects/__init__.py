from gifcapture.core.value_objects.frame_schedule import FrameSchedule
from gifcapture.core.value_objects.stage_progress import (
    TOTAL_STAGES,
    BufferingStatus,
    Stage,
    StageProgressInfo,
)
from gifcapture.core.value_objects.text_overlay import TextOverlay
from gifcapture.core.value_objects.time_range import TimeRange

__all__ = [
    "TimeRange", "TextOverlay", "FrameSchedule",
    "Stage", "StageProgressInfo", "BufferingStatus", "TOTAL_STAGES",
]
