"""Selection of the GIF encoding engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from gifcapture.adapters.outbound.encoders.ffmpeg_gif_encoder import FFmpegGifEncoder
from gifcapture.adapters.outbound.encoders.pillow_gif_encoder import PillowGifEncoder
from gifcapture.core.exceptions import EncodingError
from gifcapture.ports.outbound.gif_encoder_port import GifEncoderPort

logger = logging.getLogger(__name__)

AUTO = "auto"

# Best quality first
DEFAULT_PRIORITY = ["ffmpeg-palette", "pillow-mediancut", "pillow-fastoctree"]
FAST_PRIORITY = ["pillow-fastoctree", "ffmpeg-palette", "pillow-mediancut"]


@dataclass(frozen=True)
class EncoderSelection:
    encoder: GifEncoderPort
    reason: str


class EncoderFactory:
    """Picks an available engine by name or by priority, caching availability checks."""

    def __init__(self, encoders: list[GifEncoderPort], preferred: str = AUTO) -> None:
        self._encoders = {e.name: e for e in encoders}
        self._preferred = preferred
        self._availability: dict[str, bool] = {}

    @classmethod
    def create_default(
        cls,
        preferred: str = AUTO,
        use_ffmpeg: bool = True,
        ffmpeg_path: Optional[str] = None,
    ) -> EncoderFactory:
        encoders: list[GifEncoderPort] = []
        if use_ffmpeg:
            encoders.append(FFmpegGifEncoder(ffmpeg_path=ffmpeg_path))
        encoders.append(PillowGifEncoder("mediancut"))
        encoders.append(PillowGifEncoder("fastoctree"))
        return cls(encoders, preferred=preferred)

    @property
    def names(self) -> list[str]:
        return list(self._encoders)

    def is_available(self, name: str) -> bool:
        if name in self._availability:
            return self._availability[name]
        encoder = self._encoders.get(name)
        if encoder is None:
            return False
        try:
            available = bool(encoder.is_available())
        except Exception as e:
            logger.warning("Availability check failed for %s: %s", name, e)
            available = False
        self._availability[name] = available
        return available

    def select(self, quality: str = "medium", preference: Optional[str] = None) -> EncoderSelection:
        preference = preference or self._preferred
        if preference != AUTO:
            if self.is_available(preference):
                return EncoderSelection(self._encoders[preference], f"Preference: {preference}")
            logger.warning("Preferred encoder %s unavailable, falling back", preference)

        priority = FAST_PRIORITY if quality == "low" else DEFAULT_PRIORITY
        for name in priority:
            if self.is_available(name):
                reason = (
                    "Auto-selected by priority" if preference == AUTO
                    else f"Fallback to {name} ({preference} unavailable)"
                )
                return EncoderSelection(self._encoders[name], reason)

        for name in self._encoders:
            if self.is_available(name):
                return EncoderSelection(self._encoders[name], "Fallback to any available encoder")

        raise EncodingError("No GIF encoder available in this environment")

    def available_encoders(self) -> list[dict]:
        return [{"name": name, "available": self.is_available(name)} for name in self.names]
