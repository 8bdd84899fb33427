"""FFmpeg palette-based GIF encoding engine."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from gifcapture.adapters.outbound.ffmpeg.ffmpeg_base import get_ffmpeg_path, run_ffmpeg_pipe
from gifcapture.application.dto.encoder_frame import EncodedGif, EncodeOptions, EncoderFrame

logger = logging.getLogger(__name__)

# quality -> (max palette colors, paletteuse dither)
_QUALITY_MAP: dict[str, tuple[int, str]] = {
    "low": (64, "none"),
    "medium": (128, "bayer:bayer_scale=3"),
    "high": (256, "sierra2_4a"),
}


class FFmpegGifEncoder:
    """Implements GifEncoderPort by piping raw RGBA frames through palettegen/paletteuse."""

    name = "ffmpeg-palette"

    def __init__(self, ffmpeg_path: Optional[str] = None, timeout: Optional[int] = 300) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._timeout = timeout

    # -- Port interface --------------------------------------------------------

    def is_available(self) -> bool:
        return get_ffmpeg_path(self._ffmpeg_path) is not None

    def encode(self, frames: list[EncoderFrame], options: EncodeOptions) -> EncodedGif:
        if not frames:
            raise ValueError("No frames to encode")
        binary = get_ffmpeg_path(self._ffmpeg_path)
        if binary is None:
            raise RuntimeError("ffmpeg executable not found")

        colors, dither = _QUALITY_MAP.get(options.quality, _QUALITY_MAP["medium"])
        raw = b"".join(self._frame_bytes(f.pixels, options) for f in frames)
        filter_graph = (
            f"[0:v]split[a][b];"
            f"[a]palettegen=max_colors={colors}:stats_mode=diff[p];"
            f"[b][p]paletteuse=dither={dither}:diff_mode=rectangle"
        )

        logger.info(
            "Encoding %d frames with ffmpeg (%dx%d, %.2f fps, quality=%s)",
            len(frames), options.width, options.height, options.frame_rate, options.quality,
        )
        data = run_ffmpeg_pipe(
            [
                "-f", "rawvideo",
                "-pix_fmt", "rgba",
                "-s", f"{options.width}x{options.height}",
                "-r", f"{options.frame_rate:g}",
                "-i", "-",
                "-filter_complex", filter_graph,
                "-loop", "0" if options.loop else "-1",
                "-f", "gif",
                "-",
            ],
            raw,
            ffmpeg_path=binary,
            timeout=self._timeout,
        )
        return EncodedGif(
            data=data,
            encoder=self.name,
            width=options.width,
            height=options.height,
            frame_count=len(frames),
            extra={"colors": colors, "dither": dither},
        )

    # -- Helpers ---------------------------------------------------------------

    @staticmethod
    def _frame_bytes(pixels: np.ndarray, options: EncodeOptions) -> bytes:
        expected = (options.height, options.width, 4)
        if pixels.shape != expected:
            raise ValueError(f"Frame shape {pixels.shape} does not match {expected}")
        return np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()
