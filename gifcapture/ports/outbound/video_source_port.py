"""Port for the playable video being captured."""
from __future__ import annotations
from enum import IntEnum
from typing import Protocol, runtime_checkable

import numpy as np


class ReadyState(IntEnum):
    """How much media the source has available at its current position."""
    HAVE_NOTHING = 0
    HAVE_METADATA = 1
    HAVE_CURRENT_DATA = 2
    HAVE_FUTURE_DATA = 3
    HAVE_ENOUGH_DATA = 4


@runtime_checkable
class VideoSourcePort(Protocol):
    current_time: float

    @property
    def paused(self) -> bool: ...
    @property
    def video_width(self) -> int: ...
    @property
    def video_height(self) -> int: ...
    @property
    def duration(self) -> float: ...
    @property
    def ready_state(self) -> int: ...
    def pause(self) -> None: ...
    def play(self) -> None: ...
    def buffered(self) -> list[tuple[float, float]]: ...
    def draw_frame(self, surface: np.ndarray) -> None: ...
