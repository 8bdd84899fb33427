"""Single-flight guard: at most one capture session per service instance."""
from __future__ import annotations

import threading


class SingleFlightGuard:
    """Non-blocking try-acquire lock.

    ``try_acquire`` never waits; a caller that loses the race is expected to
    fail fast instead of queueing behind the active session.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def is_held(self) -> bool:
        return self._lock.locked()
