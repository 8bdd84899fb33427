"""Port for receiving stage progress updates."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable
if TYPE_CHECKING:
    from gifcapture.core.value_objects.stage_progress import StageProgressInfo


@runtime_checkable
class ProgressSinkPort(Protocol):
    def __call__(self, info: StageProgressInfo) -> None: ...
