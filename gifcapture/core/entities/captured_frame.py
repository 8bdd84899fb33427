"""CapturedFrame entity - one accepted frame of a capture session."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class CapturedFrame:
    """A frame copied out of the reusable capture surface.

    ``pixels`` is an ``H x W x 4`` RGBA ``uint8`` array owned by this frame
    alone; it is flagged read-only when the frame is built.
    """

    index: int
    target_timestamp: float
    actual_timestamp: float
    pixels: np.ndarray
    is_duplicate: bool = False

    @classmethod
    def from_surface(
        cls,
        index: int,
        target_timestamp: float,
        actual_timestamp: float,
        surface: np.ndarray,
        is_duplicate: bool = False,
    ) -> CapturedFrame:
        pixels = surface.copy()
        pixels.setflags(write=False)
        return cls(
            index=index,
            target_timestamp=target_timestamp,
            actual_timestamp=actual_timestamp,
            pixels=pixels,
            is_duplicate=is_duplicate,
        )

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def seek_error(self) -> float:
        return abs(self.actual_timestamp - self.target_timestamp)
