from gifcapture.ports.outbound.frame_diagnostics_port import FrameDiagnosticsPort
from gifcapture.ports.outbound.gif_encoder_port import GifEncoderPort
from gifcapture.ports.outbound.gif_storage_port import GifStoragePort
from gifcapture.ports.outbound.progress_sink_port import ProgressSinkPort
from gifcapture.ports.outbound.text_overlay_port import TextOverlayPort
from gifcapture.ports.outbound.video_source_port import ReadyState, VideoSourcePort

__all__ = [
    "VideoSourcePort",
    "ReadyState",
    "GifEncoderPort",
    "TextOverlayPort",
    "ProgressSinkPort",
    "FrameDiagnosticsPort",
    "GifStoragePort",
]
