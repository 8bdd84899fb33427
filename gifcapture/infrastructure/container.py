"""
Dependency container.
Wires together ports and adapters based on configuration.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from gifcapture.infrastructure.config import Settings

logger = logging.getLogger(__name__)


class ApplicationContainer:
    """Simplified container that builds concrete instances from settings.

    Usage::

        container = ApplicationContainer(settings)
        service = container.gif_pipeline_service()
    """

    def __init__(self, settings: Optional[Settings] = None, video_source_factory: Optional[Callable] = None):
        self.settings = settings or Settings()
        self._cache: dict[str, object] = {}
        self._video_source_factory = video_source_factory

    def _get_or_create(self, key: str, factory):
        if key not in self._cache:
            self._cache[key] = factory(self.settings)
        return self._cache[key]

    # ── Lazy factory helpers ──────────────────────────────────────

    @staticmethod
    def _build_encoder_factory(settings: Settings):
        from gifcapture.adapters.outbound.encoders.encoder_factory import EncoderFactory
        return EncoderFactory.create_default(
            preferred=settings.encoder.preferred,
            use_ffmpeg=settings.encoder.use_ffmpeg,
            ffmpeg_path=settings.encoder.ffmpeg_path,
        )

    @staticmethod
    def _build_text_overlay(settings: Settings):
        from gifcapture.adapters.outbound.media.pil_compositor import PILTextCompositor
        return PILTextCompositor()

    @staticmethod
    def _build_file_storage(settings: Settings):
        from gifcapture.adapters.outbound.persistence.local_file_storage import LocalGifStorage
        return LocalGifStorage(base_dir=settings.storage.output_dir)

    @staticmethod
    def _build_progress_tracker(settings: Settings):
        from gifcapture.adapters.outbound.progress.progress_tracker import LoggingProgressSink, ProgressTracker
        return ProgressTracker(forward=LoggingProgressSink())

    @staticmethod
    def _build_diagnostics(settings: Settings):
        if not settings.diagnostics.enabled:
            return None
        from gifcapture.adapters.outbound.diagnostics.in_memory_frame_collector import InMemoryFrameCollector
        return InMemoryFrameCollector(max_events=settings.diagnostics.max_events)

    # ── Port accessors ─────────────────────────────────────────────

    def encoder_factory(self):
        return self._get_or_create("encoder_factory", self._build_encoder_factory)

    def text_overlay(self):
        return self._get_or_create("text_overlay", self._build_text_overlay)

    def file_storage(self):
        return self._get_or_create("file_storage", self._build_file_storage)

    def progress_tracker(self):
        return self._get_or_create("progress_tracker", self._build_progress_tracker)

    def diagnostics(self):
        return self._get_or_create("diagnostics", self._build_diagnostics)

    def video_source(self, video_path: str | Path):
        """Open a video source for *video_path*; not cached, the caller closes it."""
        if self._video_source_factory is not None:
            return self._video_source_factory(video_path)
        from gifcapture.adapters.outbound.media.opencv_video_source import OpenCVVideoSource
        return OpenCVVideoSource(video_path)

    # ── Application services ───────────────────────────────────────

    def gif_pipeline_service(self):
        return self._get_or_create("gif_pipeline_service", self._build_gif_pipeline_service)

    def _build_gif_pipeline_service(self, settings: Settings):
        from gifcapture.application.encoder_adapter import EncoderAdapter
        from gifcapture.application.fallback_capture import FallbackCapture
        from gifcapture.application.frame_capture_service import FrameCaptureService
        from gifcapture.application.gif_pipeline_service import GifPipelineService
        from gifcapture.application.seek_controller import SeekController

        logger.info("Building GIF pipeline (encoder preference: %s)", settings.encoder.preferred)
        return GifPipelineService(
            capture_service=FrameCaptureService(SeekController(settings.capture), settings.capture),
            fallback=FallbackCapture(settings.fallback),
            encoder=EncoderAdapter(self.encoder_factory(), loop=settings.encoder.loop),
            compositor=self.text_overlay(),
            storage=self.file_storage(),
            settings=settings,
        )
