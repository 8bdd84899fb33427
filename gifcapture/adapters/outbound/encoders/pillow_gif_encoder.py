"""Pillow quantization GIF encoding engine."""
from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from gifcapture.application.dto.encoder_frame import EncodedGif, EncodeOptions, EncoderFrame

logger = logging.getLogger(__name__)

_METHODS = {
    "mediancut": Image.Quantize.MEDIANCUT,
    "fastoctree": Image.Quantize.FASTOCTREE,
}

# quality -> (palette colors, dithering)
_QUALITY_MAP: dict[str, tuple[int, Image.Dither]] = {
    "low": (64, Image.Dither.NONE),
    "medium": (128, Image.Dither.FLOYDSTEINBERG),
    "high": (256, Image.Dither.FLOYDSTEINBERG),
}


class PillowGifEncoder:
    """Implements GifEncoderPort with Pillow's quantizers and animated GIF writer."""

    def __init__(self, method: str = "mediancut") -> None:
        if method not in _METHODS:
            raise ValueError(f"Unknown quantize method: {method}")
        self._method = method
        self.name = f"pillow-{method}"

    def is_available(self) -> bool:
        return True

    def encode(self, frames: list[EncoderFrame], options: EncodeOptions) -> EncodedGif:
        if not frames:
            raise ValueError("No frames to encode")

        colors, dither = _QUALITY_MAP.get(options.quality, _QUALITY_MAP["medium"])
        images = [self._quantize(f, colors, dither, options) for f in frames]

        save_kwargs = {
            "format": "GIF",
            "save_all": True,
            "append_images": images[1:],
            "duration": [f.delay for f in frames],
            "disposal": 1,
            "optimize": False,
        }
        if options.loop:
            save_kwargs["loop"] = 0

        buf = io.BytesIO()
        images[0].save(buf, **save_kwargs)
        data = buf.getvalue()
        logger.info(
            "Pillow encoded %d frames (%s, %d colors) -> %d bytes",
            len(frames), self._method, colors, len(data),
        )
        return EncodedGif(
            data=data,
            encoder=self.name,
            width=options.width,
            height=options.height,
            frame_count=len(frames),
            extra={"colors": colors, "method": self._method},
        )

    def _quantize(
        self,
        frame: EncoderFrame,
        colors: int,
        dither: Image.Dither,
        options: EncodeOptions,
    ) -> Image.Image:
        image = Image.fromarray(np.ascontiguousarray(frame.pixels, dtype=np.uint8)).convert("RGB")
        if image.size != (options.width, options.height):
            image = image.resize((options.width, options.height), Image.Resampling.LANCZOS)
        return image.quantize(colors=colors, method=_METHODS[self._method], dither=dither)
