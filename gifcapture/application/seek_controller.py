"""
Seek controller.
Drives the video source to a target timestamp and waits until the frame
there is decoded, tolerating sources that never land exactly on target.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from gifcapture.core.exceptions import SourceUnavailableError
from gifcapture.infrastructure.config import CaptureSettings
from gifcapture.ports.outbound.video_source_port import ReadyState, VideoSourcePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeekOutcome:
    target: float
    actual: float
    previous: float
    attempts: int
    stalled: bool
    ready: bool
    duration_ms: float

    @property
    def error(self) -> float:
        return abs(self.actual - self.target)


def is_buffered(source: VideoSourcePort, timestamp: float) -> bool:
    return any(start <= timestamp <= end for start, end in source.buffered())


class SeekController:
    """Seek, settle, poll for readiness, then settle again."""

    def __init__(self, settings: CaptureSettings | None = None) -> None:
        self._settings = settings or CaptureSettings()

    async def seek(self, source: VideoSourcePort, target: float, frame_number: int = 0) -> SeekOutcome:
        s = self._settings
        started = time.monotonic()
        try:
            previous = source.current_time
            source.current_time = target
            await asyncio.sleep(s.seek_settle_ms / 1000)

            attempts = 0
            stalled = False
            ready = False
            last_checked = source.current_time
            while attempts < s.poll_attempts:
                current = source.current_time
                if (
                    abs(current - target) < s.seek_tolerance
                    and source.ready_state >= ReadyState.HAVE_CURRENT_DATA
                    and is_buffered(source, target)
                ):
                    ready = True
                    break
                if attempts > s.stall_min_attempts and abs(current - last_checked) < s.stall_epsilon:
                    logger.debug(
                        "Source appears stuck at %.3fs after %d attempts", current, attempts,
                    )
                    stalled = True
                    break
                last_checked = current
                await asyncio.sleep(s.poll_interval_ms / 1000)
                attempts += 1

            distance = abs(target - previous)
            settle_ms = s.long_seek_settle_ms if distance > s.long_seek_threshold else s.short_seek_settle_ms
            await asyncio.sleep(settle_ms / 1000)

            actual = source.current_time
        except SourceUnavailableError:
            raise
        except Exception as e:
            raise SourceUnavailableError(f"Video source failed while seeking to {target:.3f}s: {e}") from e

        duration_ms = (time.monotonic() - started) * 1000
        if abs(actual - target) > s.inaccuracy_warning:
            logger.warning(
                "Seek inaccuracy for frame %d: target=%.2fs, actual=%.2fs",
                frame_number, target, actual,
            )
        logger.debug(
            "Seek completed for frame %d in %.0fms (target=%.2fs, actual=%.2fs)",
            frame_number, duration_ms, target, actual,
        )
        return SeekOutcome(
            target=target,
            actual=actual,
            previous=previous,
            attempts=attempts,
            stalled=stalled,
            ready=ready,
            duration_ms=duration_ms,
        )
