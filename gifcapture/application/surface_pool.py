"""
Reusable pixel surfaces for one capture session.
The source renders into ``main`` for every frame and into ``recovery`` for
recovery attempts; accepted frames are copied out before the next draw.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from gifcapture.core.exceptions import SurfaceUnavailableError

logger = logging.getLogger(__name__)

MAIN = "main"
RECOVERY = "recovery"


class SurfacePool:
    """Two RGBA surfaces of the session's output size."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise SurfaceUnavailableError(f"Cannot allocate a {width}x{height} surface")
        self.width = width
        self.height = height
        self._surfaces: dict[str, Optional[np.ndarray]] = {MAIN: None, RECOVERY: None}

    def _get(self, name: str) -> np.ndarray:
        if name not in self._surfaces:
            raise SurfaceUnavailableError(f"Unknown surface {name!r}")
        surface = self._surfaces[name]
        if surface is None:
            surface = np.zeros((self.height, self.width, 4), dtype=np.uint8)
            self._surfaces[name] = surface
            logger.debug("Allocated %s surface %dx%d", name, self.width, self.height)
        return surface

    def clear(self, name: str) -> np.ndarray:
        """Return the named surface, zeroed and ready to draw into."""
        surface = self._get(name)
        surface.fill(0)
        return surface

    @property
    def main(self) -> np.ndarray:
        return self._get(MAIN)

    @property
    def recovery(self) -> np.ndarray:
        return self._get(RECOVERY)

    def promote_recovery(self) -> None:
        """Copy the recovery surface over the main one."""
        np.copyto(self.main, self.recovery)

    def release(self) -> None:
        self._surfaces = {MAIN: None, RECOVERY: None}
