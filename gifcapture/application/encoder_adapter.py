"""
Encoder adapter.
Turns composited frames into encoder-native records and runs the selected
engine off the event loop.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Protocol

import numpy as np

from gifcapture.application.dto.encoder_frame import EncodedGif, EncodeOptions, EncoderFrame
from gifcapture.core.exceptions import EncodingError
from gifcapture.ports.outbound.gif_encoder_port import GifEncoderPort

logger = logging.getLogger(__name__)


class EncoderSelector(Protocol):
    def select(self, quality: str = "medium", preference: Optional[str] = None): ...


def build_encoder_frames(frames: list[np.ndarray], frame_rate: float) -> list[EncoderFrame]:
    frame_ms = 1000 / frame_rate
    delay = int(frame_ms + 0.5)
    return [
        EncoderFrame(pixels=pixels, timestamp=index * frame_ms, delay=delay)
        for index, pixels in enumerate(frames)
    ]


class EncoderAdapter:
    """Hands frames to a GIF engine; every engine failure becomes EncodingError."""

    def __init__(self, selector: EncoderSelector, loop: bool = True) -> None:
        self._selector = selector
        self._loop = loop

    async def encode(
        self,
        frames: list[np.ndarray],
        quality: str,
        frame_rate: float,
        preference: Optional[str] = None,
    ) -> tuple[EncodedGif, float]:
        """Encode *frames*; returns the GIF and the encoding time in milliseconds."""
        if not frames:
            raise EncodingError("Failed to encode GIF: no frames captured")

        height, width = frames[0].shape[:2]
        options = EncodeOptions(
            width=int(width),
            height=int(height),
            quality=quality,
            frame_rate=frame_rate,
            loop=self._loop,
        )
        encoder_frames = build_encoder_frames(frames, frame_rate)

        try:
            selection = self._selector.select(quality=quality, preference=preference)
            encoder: GifEncoderPort = selection.encoder
            logger.info("Encoding %d frames with %s (%s)", len(frames), encoder.name, selection.reason)

            started = time.monotonic()
            loop = asyncio.get_running_loop()
            encoded = await loop.run_in_executor(None, encoder.encode, encoder_frames, options)
            elapsed_ms = (time.monotonic() - started) * 1000
        except Exception as e:
            logger.error("Failed to encode GIF: %s", e)
            message = str(e)
            if isinstance(e, EncodingError) and message.startswith("Failed to encode GIF"):
                raise
            raise EncodingError(f"Failed to encode GIF: {message}") from e

        if not encoded.data:
            raise EncodingError(f"Failed to encode GIF: {encoder.name} returned no data")

        logger.info("GIF encoding finished: %d bytes in %.0fms", encoded.size, elapsed_ms)
        return encoded, elapsed_ms
