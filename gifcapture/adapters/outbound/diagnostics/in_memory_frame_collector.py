"""In-memory frame diagnostics collector."""
from __future__ import annotations

import logging
from collections import deque
from typing import Union

from gifcapture.core.events.capture_events import CaptureFallbackTriggered, FrameCaptured

logger = logging.getLogger(__name__)

DiagnosticEvent = Union[FrameCaptured, CaptureFallbackTriggered]


class InMemoryFrameCollector:
    """Keeps the most recent capture events for inspection.

    Satisfies :class:`~gifcapture.ports.outbound.frame_diagnostics_port.FrameDiagnosticsPort`.
    """

    def __init__(self, max_events: int = 1000) -> None:
        self._events: deque[DiagnosticEvent] = deque(maxlen=max_events)

    def record(self, event: DiagnosticEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[DiagnosticEvent]:
        return list(self._events)

    @property
    def frames(self) -> list[FrameCaptured]:
        return [e for e in self._events if isinstance(e, FrameCaptured)]

    def summary(self) -> dict:
        frames = self.frames
        if not frames:
            return {
                "frames": 0, "duplicates": 0, "recovered": 0, "stalled": 0,
                "max_seek_error": 0.0, "fallbacks": 0,
            }
        return {
            "frames": len(frames),
            "duplicates": sum(1 for f in frames if f.is_duplicate),
            "recovered": sum(1 for f in frames if f.recovered),
            "stalled": sum(1 for f in frames if f.stalled),
            "max_seek_error": max(abs(f.actual_timestamp - f.target_timestamp) for f in frames),
            "fallbacks": sum(1 for e in self._events if isinstance(e, CaptureFallbackTriggered)),
        }

    def clear(self) -> None:
        self._events.clear()
