"""Progress value objects emitted while a GIF is being created."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class Stage(str, Enum):
    CAPTURING = "CAPTURING"
    ANALYZING = "ANALYZING"
    ENCODING = "ENCODING"
    FINALIZING = "FINALIZING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    @property
    def number(self) -> int:
        """1-based position among the four working stages (terminal stages report 4)."""
        return _STAGE_NUMBERS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.COMPLETED, Stage.ERROR)


_STAGE_NUMBERS = {
    Stage.CAPTURING: 1,
    Stage.ANALYZING: 2,
    Stage.ENCODING: 3,
    Stage.FINALIZING: 4,
    Stage.COMPLETED: 4,
    Stage.ERROR: 4,
}

TOTAL_STAGES = 4


@dataclass(frozen=True)
class BufferingStatus:
    """Real-time snapshot of frame capture progress."""

    current_frame: int
    total_frames: int
    buffered_percentage: float
    estimated_time_remaining: int
    is_buffering: bool = False


@dataclass(frozen=True)
class StageProgressInfo:
    stage: Stage
    stage_number: int
    stage_name: str
    message: str
    progress: float
    total_stages: int = TOTAL_STAGES
    encoder: Optional[str] = None
    buffering_status: Optional[BufferingStatus] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["stage"] = self.stage.value
        return data
