"""Deadline shared between the pipeline and the verified capture loop."""
from __future__ import annotations

import asyncio
import time
from typing import Optional

from gifcapture.core.exceptions import SeekTimeoutError


class CaptureDeadline:
    """Cooperative abandon flag armed with a timer.

    The capture loop calls :meth:`check` at every frame boundary; nothing is
    interrupted mid-frame.
    """

    def __init__(self, deadline_ms: float) -> None:
        self.deadline_ms = deadline_ms
        self._started = time.monotonic()
        self._abandoned = False
        self._handle: Optional[asyncio.TimerHandle] = None

    def arm(self) -> None:
        loop = asyncio.get_running_loop()
        self._started = time.monotonic()
        self._handle = loop.call_later(self.deadline_ms / 1000, self.abandon)

    def disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def abandon(self) -> None:
        self._abandoned = True

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._started) * 1000

    def check(self) -> None:
        if self.abandoned:
            raise SeekTimeoutError(elapsed_ms=self.elapsed_ms, deadline_ms=self.deadline_ms)
