"""TextOverlay value object: a caption drawn on every frame."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TextOverlay:
    """A single line of text positioned in percent of the frame size.

    ``x_percent``/``y_percent`` locate the *center* of the text.
    """

    text: str
    x_percent: float = 50.0
    y_percent: float = 90.0
    font_size: int = 24
    font_family: str = "DejaVuSans.ttf"
    color: str = "#ffffff"
    stroke_color: Optional[str] = None
    stroke_width: Optional[int] = None

    def resolve_position(self, width: int, height: int) -> tuple[float, float]:
        return (self.x_percent / 100) * width, (self.y_percent / 100) * height

    @classmethod
    def from_dict(cls, data: dict) -> TextOverlay:
        position = data.get("position") or {}
        return cls(
            text=str(data.get("text", "")),
            x_percent=float(position.get("x", data.get("x_percent", 50.0))),
            y_percent=float(position.get("y", data.get("y_percent", 90.0))),
            font_size=int(data.get("font_size", data.get("fontSize", 24))),
            font_family=data.get("font_family", data.get("fontFamily", "DejaVuSans.ttf")),
            color=data.get("color", "#ffffff"),
            stroke_color=data.get("stroke_color", data.get("strokeColor")),
            stroke_width=data.get("stroke_width", data.get("strokeWidth")),
        )
