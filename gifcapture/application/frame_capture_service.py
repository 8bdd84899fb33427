"""
Verified frame capture.
For each scheduled timestamp: seek, render into the main surface, check for
a repeat of the previous frame (with one recovery attempt), copy the pixels
out and report progress.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

import numpy as np

from gifcapture.application.capture_deadline import CaptureDeadline
from gifcapture.application.seek_controller import SeekController
from gifcapture.application.stage_progress_reporter import StageProgressReporter
from gifcapture.application.surface_pool import MAIN, RECOVERY, SurfacePool
from gifcapture.core.entities.capture_session import CaptureSession
from gifcapture.core.entities.captured_frame import CapturedFrame
from gifcapture.core.events.capture_events import FrameCaptured
from gifcapture.core.exceptions import SourceUnavailableError
from gifcapture.core.services.duplicate_detector import DuplicateDetector
from gifcapture.infrastructure.config import CaptureSettings
from gifcapture.ports.outbound.frame_diagnostics_port import FrameDiagnosticsPort
from gifcapture.ports.outbound.video_source_port import VideoSourcePort

logger = logging.getLogger(__name__)


async def draw_into(source: VideoSourcePort, surface: np.ndarray) -> None:
    """Render the current frame into *surface* on the default executor."""
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, source.draw_frame, surface)
    except Exception as e:
        raise SourceUnavailableError(f"Video source failed to render a frame: {e}") from e


def record_event(diagnostics: Optional[FrameDiagnosticsPort], event) -> None:
    if diagnostics is None:
        return
    try:
        diagnostics.record(event)
    except Exception as e:
        logger.warning("Frame diagnostics collector failed: %s", e)


class FrameCaptureService:
    """Runs the seek-verified capture loop for one session."""

    def __init__(
        self,
        seek_controller: SeekController | None = None,
        settings: CaptureSettings | None = None,
    ) -> None:
        self._settings = settings or CaptureSettings()
        self._seek = seek_controller or SeekController(self._settings)

    async def capture(
        self,
        source: VideoSourcePort,
        session: CaptureSession,
        detector: DuplicateDetector,
        surfaces: SurfacePool,
        reporter: StageProgressReporter,
        deadline: Optional[CaptureDeadline] = None,
        diagnostics: Optional[FrameDiagnosticsPort] = None,
    ) -> list[CapturedFrame]:
        schedule = session.schedule
        total = schedule.frame_count

        for index, target in enumerate(schedule.timestamps()):
            if deadline is not None:
                deadline.check()

            frame_started = time.monotonic()
            outcome = await self._seek.seek(source, target, index + 1)

            surface = surfaces.clear(MAIN)
            await draw_into(source, surface)

            previous = session.last_frame
            is_duplicate = False
            recovered = False
            similarity = None
            if previous is not None:
                similarity = detector.similarity(surface, previous.pixels)
                if similarity > detector.threshold:
                    is_duplicate = True
                    position = source.current_time
                    count = detector.register_duplicate(frame_index=index, video_time=position)
                    logger.warning(
                        "Duplicate frame at %d/%d: source at %.3fs (wanted %.3fs, prev was %.3fs) "
                        "[consecutive: %d/%d]",
                        index + 1, total, position, target, outcome.previous, count, detector.bound,
                    )
                    if abs(position - target) > self._settings.recovery_min_offset:
                        recovered = await self._recover(source, target, index, previous, detector, surfaces)
                        if recovered:
                            is_duplicate = False
                else:
                    detector.reset()
            session.consecutive_duplicate_count = detector.consecutive_count

            actual = source.current_time
            frame = CapturedFrame.from_surface(
                index=index,
                target_timestamp=target,
                actual_timestamp=actual,
                surface=surface,
                is_duplicate=is_duplicate,
            )
            session.append(frame)

            frame_ms = (time.monotonic() - frame_started) * 1000
            reporter.report_frame(len(session.frames), total, frame_ms, source)
            record_event(diagnostics, FrameCaptured(
                session_id=session.id,
                frame_index=index,
                target_timestamp=target,
                actual_timestamp=actual,
                is_duplicate=is_duplicate,
                seek_attempts=outcome.attempts,
                stalled=outcome.stalled,
                recovered=recovered,
                similarity=similarity,
                capture_ms=frame_ms,
            ))
            logger.debug(
                "Captured frame %d/%d at %.2fs (target: %.2fs, off by %.3fs)",
                index + 1, total, actual, target, frame.seek_error,
            )

        return list(session.frames)

    async def _recover(
        self,
        source: VideoSourcePort,
        target: float,
        index: int,
        previous: CapturedFrame,
        detector: DuplicateDetector,
        surfaces: SurfacePool,
    ) -> bool:
        """Nudge past the target once and re-render; True if the picture changed."""
        logger.info("Attempting recovery seek for frame %d", index + 1)
        try:
            source.current_time = target + self._settings.recovery_nudge
        except Exception as e:
            raise SourceUnavailableError(f"Video source failed during recovery seek: {e}") from e
        await asyncio.sleep(self._settings.recovery_wait_ms / 1000)

        recovery = surfaces.clear(RECOVERY)
        await draw_into(source, recovery)
        if detector.is_duplicate(recovery, previous.pixels):
            logger.warning("Recovery failed, still stuck at %.3fs", source.current_time)
            return False

        surfaces.promote_recovery()
        detector.reset()
        logger.info("Recovery successful, now at %.3fs", source.current_time)
        return True
