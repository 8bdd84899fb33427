"""Port for drawing text overlays onto a frame buffer."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np
if TYPE_CHECKING:
    from gifcapture.core.value_objects.text_overlay import TextOverlay


@runtime_checkable
class TextOverlayPort(Protocol):
    def apply_overlays(self, surface: np.ndarray, overlays: list[TextOverlay]) -> None: ...
