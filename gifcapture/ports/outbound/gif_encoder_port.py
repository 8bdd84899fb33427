"""Port for the external GIF encoding engine."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable
if TYPE_CHECKING:
    from gifcapture.application.dto.encoder_frame import EncodedGif, EncodeOptions, EncoderFrame


@runtime_checkable
class GifEncoderPort(Protocol):
    name: str

    def is_available(self) -> bool: ...
    def encode(self, frames: list[EncoderFrame], options: EncodeOptions) -> EncodedGif: ...
