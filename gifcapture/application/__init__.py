from gifcapture.application.encoder_adapter import EncoderAdapter
from gifcapture.application.fallback_capture import FallbackCapture
from gifcapture.application.frame_capture_service import FrameCaptureService
from gifcapture.application.gif_pipeline_service import GifPipelineService, PipelineState
from gifcapture.application.seek_controller import SeekController, SeekOutcome
from gifcapture.application.stage_progress_reporter import StageProgressReporter

__all__ = [
    "GifPipelineService",
    "PipelineState",
    "FrameCaptureService",
    "FallbackCapture",
    "SeekController",
    "SeekOutcome",
    "StageProgressReporter",
    "EncoderAdapter",
]
