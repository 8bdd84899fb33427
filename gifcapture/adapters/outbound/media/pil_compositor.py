"""PIL text overlay compositor.

Implements :class:`~gifcapture.ports.outbound.text_overlay_port.TextOverlayPort`
by drawing stroked, centered text onto an RGBA frame buffer in place.
"""
from __future__ import annotations

import functools
import logging
import re
from typing import Optional

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from gifcapture.core.exceptions import SurfaceUnavailableError
from gifcapture.core.value_objects.text_overlay import TextOverlay

logger = logging.getLogger(__name__)

DEFAULT_STROKE_COLOR = "rgba(0, 0, 0, 0.8)"
DEFAULT_STROKE_WIDTH = 2
_FALLBACK_FILL = (255, 255, 255, 255)

_RGBA_RE = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$",
    re.IGNORECASE,
)

_FONT_DIRS = (
    "",
    "/usr/share/fonts/truetype/dejavu/",
    "/usr/share/fonts/TTF/",
    "/Library/Fonts/",
    "C:/Windows/Fonts/",
)


def parse_color(value: str) -> tuple[int, int, int, int]:
    """Parse a CSS color (name, hex, rgb() or rgba() with 0-1 alpha) to RGBA."""
    text = value.strip()
    match = _RGBA_RE.match(text)
    if match:
        r, g, b = (min(255, int(match.group(i))) for i in (1, 2, 3))
        alpha = match.group(4)
        a = 255 if alpha is None else int(round(max(0.0, min(1.0, float(alpha))) * 255))
        return r, g, b, a
    rgb = ImageColor.getcolor(text, "RGBA")
    return tuple(rgb)  # type: ignore[return-value]


@functools.lru_cache(maxsize=32)
def load_font(family: str, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    names = [family] if family.lower().endswith((".ttf", ".otf")) else [f"{family}.ttf", family]
    for directory in _FONT_DIRS:
        for name in names:
            try:
                return ImageFont.truetype(f"{directory}{name}", size)
            except OSError:
                continue
    logger.debug("Font %s not found, using Pillow default", family)
    return ImageFont.load_default(size)


class PILTextCompositor:
    """Draws every overlay in order: stroke first, then fill, centered on its position."""

    def apply_overlays(self, surface: np.ndarray, overlays: list[TextOverlay]) -> None:
        self._validate(surface)
        visible = [o for o in overlays if o.text]
        if not visible:
            return

        height, width = surface.shape[:2]
        base = Image.fromarray(surface)
        for overlay in visible:
            layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
            draw = ImageDraw.Draw(layer)
            x, y = overlay.resolve_position(width, height)
            stroke_width = overlay.stroke_width or DEFAULT_STROKE_WIDTH
            draw.text(
                (x, y),
                overlay.text,
                font=load_font(overlay.font_family, overlay.font_size),
                fill=self._color(overlay.color, _FALLBACK_FILL),
                anchor="mm",
                stroke_width=max(1, (stroke_width + 1) // 2),
                stroke_fill=self._color(overlay.stroke_color or DEFAULT_STROKE_COLOR, (0, 0, 0, 204)),
            )
            base = Image.alpha_composite(base, layer)

        np.copyto(surface, np.asarray(base))

    @staticmethod
    def _validate(surface: Optional[np.ndarray]) -> None:
        if surface is None:
            raise SurfaceUnavailableError("No surface to draw overlays on")
        if not isinstance(surface, np.ndarray) or surface.dtype != np.uint8 or surface.ndim != 3 or surface.shape[2] != 4:
            raise SurfaceUnavailableError(
                f"Expected an HxWx4 uint8 surface, got {getattr(surface, 'shape', None)}"
            )
        if not surface.flags.writeable:
            raise SurfaceUnavailableError("Surface is read-only")

    @staticmethod
    def _color(value: str, fallback: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
        try:
            return parse_color(value)
        except ValueError:
            logger.warning("Unrecognised color %r, using %s", value, fallback)
            return fallback
