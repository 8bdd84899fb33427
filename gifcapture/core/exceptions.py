"""Custom exception hierarchy for GifCapture."""
from __future__ import annotations

from typing import Optional


class GifCaptureError(Exception):
    """Base exception for all GifCapture errors."""


class InvalidRequestError(GifCaptureError):
    """Raised when a capture request cannot produce a valid frame schedule."""


class SourceUnavailableError(GifCaptureError):
    """Raised when no usable video source is available, or it disappears mid-capture."""


class SeekTimeoutError(GifCaptureError):
    """Raised when the primary capture path overruns its deadline.

    Recoverable: the pipeline answers it with the fallback capture and only
    surfaces it when the fallback fails as well.
    """

    def __init__(self, elapsed_ms: float, deadline_ms: float) -> None:
        self.elapsed_ms = elapsed_ms
        self.deadline_ms = deadline_ms
        super().__init__(
            f"Frame capture exceeded its deadline ({elapsed_ms:.0f}ms > {deadline_ms:.0f}ms)"
        )


class StuckVideoError(GifCaptureError):
    """Raised when too many consecutive captured frames are identical."""

    def __init__(
        self,
        duplicate_count: int,
        bound: int,
        frame_index: Optional[int] = None,
        video_time: Optional[float] = None,
    ) -> None:
        self.duplicate_count = duplicate_count
        self.bound = bound
        self.frame_index = frame_index
        self.video_time = video_time
        super().__init__(
            f"Video buffering stuck ({duplicate_count} consecutive identical frames). "
            "Network too slow or video unavailable. Try a shorter clip or better network."
        )


class SurfaceUnavailableError(GifCaptureError):
    """Raised when a drawing surface cannot be created or reused."""


class EncodingError(GifCaptureError):
    """Raised when the external GIF encoding engine fails."""


class ConcurrentSessionError(GifCaptureError):
    """Raised when a capture session is requested while another one is active."""

    def __init__(self) -> None:
        super().__init__("Already processing a GIF")
