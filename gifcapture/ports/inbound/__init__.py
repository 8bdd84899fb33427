from gifcapture.ports.inbound.capture_gif_use_case import CaptureGifUseCase

__all__ = [
    "CaptureGifUseCase",
]
