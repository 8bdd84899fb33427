"""DTOs exchanged with the GIF encoding engines."""
from __future__ import annotations
from dataclasses import dataclass, field

import numpy as np


@dataclass
class EncoderFrame:
    pixels: np.ndarray
    timestamp: float
    delay: int


@dataclass
class EncodeOptions:
    width: int
    height: int
    quality: str = "medium"
    frame_rate: float = 5.0
    loop: bool = True


@dataclass
class EncodedGif:
    data: bytes
    encoder: str
    width: int
    height: int
    frame_count: int
    extra: dict = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.data)
