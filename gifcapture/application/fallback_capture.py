"""
Bounded-latency fallback capture.
One pass over the schedule with short fixed waits and no verification, used
when the verified loop cannot finish within its deadline.
"""
from __future__ import annotations

import asyncio
import logging

from gifcapture.application.frame_capture_service import draw_into
from gifcapture.application.stage_progress_reporter import StageProgressReporter
from gifcapture.application.surface_pool import MAIN, SurfacePool
from gifcapture.core.entities.capture_session import EXTRACTION_INSTANT_FALLBACK, CaptureSession
from gifcapture.core.entities.captured_frame import CapturedFrame
from gifcapture.core.exceptions import SourceUnavailableError
from gifcapture.core.value_objects.time_range import TimeRange
from gifcapture.infrastructure.config import FallbackSettings
from gifcapture.ports.outbound.video_source_port import VideoSourcePort

logger = logging.getLogger(__name__)


class FallbackCapture:
    def __init__(self, settings: FallbackSettings | None = None) -> None:
        self._settings = settings or FallbackSettings()

    async def capture(
        self,
        source: VideoSourcePort,
        session: CaptureSession,
        surfaces: SurfacePool,
        end_time: float,
        reporter: StageProgressReporter | None = None,
    ) -> list[CapturedFrame]:
        schedule = session.schedule
        start_time = schedule.start_time
        segment = TimeRange(start_seconds=start_time, end_seconds=end_time)
        session.reset_frames(EXTRACTION_INSTANT_FALLBACK)
        logger.info(
            "Starting fallback capture of %d frames (%.2fs-%.2fs, source at %.2fs)",
            schedule.frame_count, start_time, end_time, source.current_time,
        )

        try:
            if not segment.contains(source.current_time):
                source.current_time = start_time
                await asyncio.sleep(self._settings.initial_seek_wait_ms / 1000)

            for index in range(schedule.frame_count):
                target = schedule.target_timestamp(index)
                if index > 0:
                    source.current_time = segment.clamp(target)
                    await asyncio.sleep(self._settings.frame_wait_ms / 1000)

                surface = surfaces.clear(MAIN)
                await draw_into(source, surface)
                session.append(CapturedFrame.from_surface(
                    index=index,
                    target_timestamp=target,
                    actual_timestamp=source.current_time,
                    surface=surface,
                ))
                if reporter is not None:
                    reporter.report_frame(len(session.frames), schedule.frame_count, 0.0, source)
                logger.debug("Fallback captured frame %d/%d", index + 1, schedule.frame_count)
        except SourceUnavailableError:
            raise
        except Exception as e:
            raise SourceUnavailableError(f"Video source failed during fallback capture: {e}") from e

        logger.info("Fallback captured %d frames", len(session.frames))
        return list(session.frames)
