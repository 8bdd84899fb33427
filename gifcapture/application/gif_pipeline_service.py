"""
GIF pipeline use case.
Schedules, captures, composites, encodes and finalizes one video segment,
one session at a time, always handing the source back the way it was found.
"""
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Optional

import numpy as np

from gifcapture.application.capture_deadline import CaptureDeadline
from gifcapture.application.dto.encoding_result import EncodingMetadata, EncodingResult
from gifcapture.application.dto.extraction_result import ExtractionMetadata, FrameExtractionResult
from gifcapture.application.encoder_adapter import EncoderAdapter
from gifcapture.application.fallback_capture import FallbackCapture
from gifcapture.application.frame_capture_service import FrameCaptureService, record_event
from gifcapture.application.single_flight import SingleFlightGuard
from gifcapture.application.stage_progress_reporter import StageProgressReporter
from gifcapture.application.surface_pool import SurfacePool
from gifcapture.core.entities.capture_request import CaptureRequest
from gifcapture.core.entities.capture_session import CaptureSession, PlaybackState
from gifcapture.core.entities.captured_frame import CapturedFrame
from gifcapture.core.events.capture_events import CaptureFallbackTriggered
from gifcapture.core.exceptions import (
    ConcurrentSessionError,
    SeekTimeoutError,
    SourceUnavailableError,
)
from gifcapture.core.services.duplicate_detector import DuplicateDetector
from gifcapture.core.services.frame_scheduler import FrameScheduler
from gifcapture.core.value_objects.frame_schedule import FrameSchedule
from gifcapture.core.value_objects.stage_progress import Stage
from gifcapture.infrastructure.config import Settings
from gifcapture.ports.outbound.frame_diagnostics_port import FrameDiagnosticsPort
from gifcapture.ports.outbound.gif_storage_port import GifStoragePort
from gifcapture.ports.outbound.progress_sink_port import ProgressSinkPort
from gifcapture.ports.outbound.text_overlay_port import TextOverlayPort
from gifcapture.ports.outbound.video_source_port import ReadyState, VideoSourcePort

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    SCHEDULING = "scheduling"
    CAPTURING = "capturing"
    ANALYZING = "analyzing"
    ENCODING = "encoding"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    ERROR = "error"


_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.IDLE: {PipelineState.SCHEDULING},
    PipelineState.SCHEDULING: {PipelineState.CAPTURING, PipelineState.ERROR},
    # extract_frames completes straight after capture
    PipelineState.CAPTURING: {PipelineState.ANALYZING, PipelineState.COMPLETED, PipelineState.ERROR},
    PipelineState.ANALYZING: {PipelineState.ENCODING, PipelineState.ERROR},
    PipelineState.ENCODING: {PipelineState.FINALIZING, PipelineState.ERROR},
    PipelineState.FINALIZING: {PipelineState.COMPLETED, PipelineState.ERROR},
    PipelineState.COMPLETED: {PipelineState.IDLE},
    PipelineState.ERROR: {PipelineState.IDLE},
}


class GifPipelineService:
    """Orchestrates one capture session end to end."""

    def __init__(
        self,
        capture_service: FrameCaptureService,
        fallback: FallbackCapture,
        encoder: EncoderAdapter,
        compositor: TextOverlayPort,
        storage: Optional[GifStoragePort] = None,
        settings: Optional[Settings] = None,
        scheduler: Optional[FrameScheduler] = None,
        guard: Optional[SingleFlightGuard] = None,
    ):
        self._settings = settings or Settings()
        self._capture = capture_service
        self._fallback = fallback
        self._encoder = encoder
        self._compositor = compositor
        self._storage = storage
        self._scheduler = scheduler or FrameScheduler(self._settings.capture.aspect_tolerance)
        self._guard = guard or SingleFlightGuard()
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._guard.is_held

    # -- Entry points ----------------------------------------------------------

    async def process_video_to_gif(
        self,
        source: VideoSourcePort,
        request: CaptureRequest,
        on_progress: Optional[ProgressSinkPort] = None,
        diagnostics: Optional[FrameDiagnosticsPort] = None,
    ) -> EncodingResult:
        if not self._guard.try_acquire():
            raise ConcurrentSessionError()

        reporter = StageProgressReporter(on_progress, self._settings.progress)
        started = time.monotonic()
        try:
            logger.info(
                "Starting GIF processing: %.2fs-%.2fs @ %.2f fps, %dx%d, quality=%s",
                request.start_time, request.end_time, request.frame_rate,
                request.target_width, request.target_height, request.quality,
            )
            schedule = self._schedule(source, request)

            # Stage 1: capture
            self._transition(PipelineState.CAPTURING)
            reporter.enter_stage(Stage.CAPTURING)
            session = await self._capture_frames(source, request, schedule, reporter, diagnostics)
            logger.info("Frames captured: %d (%s)", len(session.frames), session.extraction_method)

            # Stage 2: analyze and composite overlays
            self._transition(PipelineState.ANALYZING)
            reporter.enter_stage(Stage.ANALYZING)
            composited = await self._composite(session.frames, request)
            await asyncio.sleep(self._settings.pipeline.analyzing_pause_ms / 1000)

            # Stage 3: encode
            self._transition(PipelineState.ENCODING)
            reporter.enter_stage(Stage.ENCODING)
            encoded, encoding_ms = await self._encoder.encode(
                composited,
                quality=request.quality,
                frame_rate=request.frame_rate,
                preference=self._settings.encoder.preferred,
            )
            logger.info("GIF encoded: %d bytes with %s", encoded.size, encoded.encoder)

            # Stage 4: finalize
            self._transition(PipelineState.FINALIZING)
            reporter.enter_stage(Stage.FINALIZING)
            await asyncio.sleep(self._settings.pipeline.finalizing_pause_ms / 1000)
            frame_count = len(session.frames)
            metadata = EncodingMetadata(
                file_size=encoded.size,
                duration=request.duration,
                frame_count=frame_count,
                width=encoded.width,
                height=encoded.height,
                encoder=encoded.encoder,
                id=session.id,
                extraction_method=session.extraction_method,
                actual_frame_rate=session.actual_frame_rate(request.duration),
                encoding_time=encoding_ms,
                average_frame_time=encoding_ms / frame_count if frame_count else None,
            )

            self._transition(PipelineState.COMPLETED)
            reporter.complete(encoded.encoder)
            logger.info(
                "Processing complete in %.0fms: %s", (time.monotonic() - started) * 1000, metadata.to_dict(),
            )
            return EncodingResult(blob=encoded.data, metadata=metadata)

        except Exception as e:
            logger.error("GIF processing failed: %s", e)
            self._fail_state()
            reporter.fail(e)
            raise
        finally:
            reporter.close()
            self._reset_state()
            self._guard.release()

    async def extract_frames(
        self,
        source: VideoSourcePort,
        request: CaptureRequest,
        on_progress: Optional[ProgressSinkPort] = None,
    ) -> FrameExtractionResult:
        """Capture frames without encoding; returns an empty result while another session runs."""
        if not self._guard.try_acquire():
            logger.warning("Frame extraction requested while another session is active")
            return FrameExtractionResult()

        reporter = StageProgressReporter(on_progress, self._settings.progress)
        started = time.monotonic()
        try:
            schedule = self._schedule(source, request)
            self._transition(PipelineState.CAPTURING)
            reporter.enter_stage(Stage.CAPTURING)
            session = await self._capture_frames(source, request, schedule, reporter, None)
            self._transition(PipelineState.COMPLETED)

            frames = list(session.frames)
            return FrameExtractionResult(
                frames=frames,
                metadata=ExtractionMetadata(
                    total_frames=len(frames),
                    actual_frame_rate=session.actual_frame_rate(request.duration),
                    width=schedule.output_width,
                    height=schedule.output_height,
                    duration=request.duration,
                    extraction_method=session.extraction_method,
                    processing_time=(time.monotonic() - started) * 1000,
                ),
            )
        except Exception as e:
            logger.error("Frame extraction failed: %s", e)
            self._fail_state()
            reporter.fail(e)
            raise
        finally:
            reporter.close()
            self._reset_state()
            self._guard.release()

    async def download_gif(self, blob: bytes, filename: Optional[str] = None) -> str:
        """Hand a finished GIF to storage; returns where it was written."""
        if self._storage is None:
            raise RuntimeError("No GIF storage configured")
        name = filename or f"{self._settings.storage.default_filename_prefix}-{int(time.time() * 1000)}.gif"
        path = await self._storage.save_file(blob, name)
        logger.info("GIF saved: %s (%d bytes)", path, len(blob))
        return path

    # -- Stages ----------------------------------------------------------------

    def _schedule(self, source: VideoSourcePort, request: CaptureRequest) -> FrameSchedule:
        self._transition(PipelineState.SCHEDULING)
        request.validate()
        width, height = self._validate_source(source)
        schedule = self._scheduler.schedule(request, width, height)
        logger.info(
            "Schedule: %d frames every %.3fs at %dx%d (source %dx%d)",
            schedule.frame_count, schedule.frame_interval,
            schedule.output_width, schedule.output_height, width, height,
        )
        return schedule

    async def _capture_frames(
        self,
        source: VideoSourcePort,
        request: CaptureRequest,
        schedule: FrameSchedule,
        reporter: StageProgressReporter,
        diagnostics: Optional[FrameDiagnosticsPort],
    ) -> CaptureSession:
        try:
            original = PlaybackState(position=source.current_time, paused=source.paused)
        except Exception as e:
            raise SourceUnavailableError(f"Cannot read playback state: {e}") from e

        session = CaptureSession(schedule=schedule, original_playback_state=original)
        surfaces = SurfacePool(*schedule.dimensions)
        dup = self._settings.duplicates
        detector = DuplicateDetector(
            request.frame_rate,
            threshold=dup.similarity_threshold,
            max_samples=dup.max_samples,
            min_bound=dup.min_bound,
            max_bound=dup.max_bound,
        )
        deadline = CaptureDeadline(self._settings.deadline_ms(schedule.frame_count))

        try:
            try:
                source.pause()
            except Exception as e:
                raise SourceUnavailableError(f"Cannot pause video source: {e}") from e
            deadline.arm()
            try:
                await self._capture.capture(
                    source, session, detector, surfaces, reporter,
                    deadline=deadline, diagnostics=diagnostics,
                )
            except SeekTimeoutError as e:
                if not self._settings.fallback.enabled:
                    raise
                logger.warning("%s; switching to fallback capture", e)
                record_event(diagnostics, CaptureFallbackTriggered(
                    session_id=session.id, reason=str(e), frames_discarded=len(session.frames),
                ))
                await self._fallback.capture(source, session, surfaces, request.end_time, reporter)
            finally:
                deadline.disarm()
        finally:
            self._restore_playback(source, original)
            surfaces.release()
        return session

    async def _composite(self, frames: list[CapturedFrame], request: CaptureRequest) -> list[np.ndarray]:
        """Copy every frame and draw the request's overlays on the copies."""
        if not request.has_overlays:
            return [frame.pixels.copy() for frame in frames]
        visible = [o for o in request.text_overlays if o.text]

        def _run() -> list[np.ndarray]:
            out = []
            for frame in frames:
                pixels = frame.pixels.copy()
                self._compositor.apply_overlays(pixels, visible)
                out.append(pixels)
            return out

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run)

    # -- Helpers ---------------------------------------------------------------

    def _fail_state(self) -> None:
        if self._state not in (PipelineState.IDLE, PipelineState.COMPLETED, PipelineState.ERROR):
            self._transition(PipelineState.ERROR)

    def _reset_state(self) -> None:
        if self._state is not PipelineState.IDLE:
            self._transition(PipelineState.IDLE)

    def _transition(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Illegal pipeline transition {self._state.value} -> {target.value}")
        logger.debug("Pipeline %s -> %s", self._state.value, target.value)
        self._state = target

    @staticmethod
    def _validate_source(source: Optional[VideoSourcePort]) -> tuple[int, int]:
        if source is None:
            raise SourceUnavailableError("No video source available")
        try:
            width, height = int(source.video_width), int(source.video_height)
            ready = source.ready_state
        except Exception as e:
            raise SourceUnavailableError(f"Cannot read video source: {e}") from e
        if width <= 0 or height <= 0:
            raise SourceUnavailableError(f"Video source has no dimensions ({width}x{height})")
        if ready < ReadyState.HAVE_METADATA:
            raise SourceUnavailableError("Video source metadata not loaded")
        return width, height

    @staticmethod
    def _restore_playback(source: VideoSourcePort, original: PlaybackState) -> None:
        try:
            source.current_time = original.position
            if not original.paused:
                source.play()
        except Exception as e:
            logger.warning("Failed to restore playback state: %s", e)
