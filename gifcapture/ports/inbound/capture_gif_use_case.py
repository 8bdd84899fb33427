"""Inbound port for turning a video segment into a GIF."""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable
if TYPE_CHECKING:
    from gifcapture.application.dto.encoding_result import EncodingResult
    from gifcapture.application.dto.extraction_result import FrameExtractionResult
    from gifcapture.core.entities.capture_request import CaptureRequest
    from gifcapture.ports.outbound.frame_diagnostics_port import FrameDiagnosticsPort
    from gifcapture.ports.outbound.progress_sink_port import ProgressSinkPort
    from gifcapture.ports.outbound.video_source_port import VideoSourcePort


@runtime_checkable
class CaptureGifUseCase(Protocol):
    @property
    def is_processing(self) -> bool: ...
    async def process_video_to_gif(
        self,
        source: VideoSourcePort,
        request: CaptureRequest,
        on_progress: Optional[ProgressSinkPort] = None,
        diagnostics: Optional[FrameDiagnosticsPort] = None,
    ) -> EncodingResult: ...
    async def extract_frames(
        self,
        source: VideoSourcePort,
        request: CaptureRequest,
        on_progress: Optional[ProgressSinkPort] = None,
    ) -> FrameExtractionResult: ...
    async def download_gif(self, blob: bytes, filename: Optional[str] = None) -> str: ...
