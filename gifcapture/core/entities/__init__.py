from gifcapture.core.entities.capture_request import QUALITY_LEVELS, CaptureRequest
from gifcapture.core.entities.capture_session import (
    EXTRACTION_INSTANT_FALLBACK,
    EXTRACTION_SEEK_VERIFIED,
    CaptureSession,
    PlaybackState,
)
from gifcapture.core.entities.captured_frame import CapturedFrame

__all__ = [
    "CaptureRequest", "QUALITY_LEVELS",
    "CapturedFrame", "CaptureSession", "PlaybackState",
    "EXTRACTION_SEEK_VERIFIED", "EXTRACTION_INSTANT_FALLBACK",
]
