"""Port for the optional per-frame diagnostics collector."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable
if TYPE_CHECKING:
    from gifcapture.core.events.capture_events import CaptureFallbackTriggered, FrameCaptured


@runtime_checkable
class FrameDiagnosticsPort(Protocol):
    def record(self, event: Union[FrameCaptured, CaptureFallbackTriggered]) -> None: ...
