"""
Stage-based progress reporting.
Four working stages, each with a rotating set of status messages, plus
throttled per-frame updates with an ETA while frames are being captured.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import deque
from typing import Callable, Optional

from gifcapture.core.value_objects.stage_progress import (
    TOTAL_STAGES,
    BufferingStatus,
    Stage,
    StageProgressInfo,
)
from gifcapture.infrastructure.config import ProgressSettings
from gifcapture.ports.outbound.progress_sink_port import ProgressSinkPort
from gifcapture.ports.outbound.video_source_port import VideoSourcePort

logger = logging.getLogger(__name__)

STAGE_NAMES = {
    Stage.CAPTURING: "Capturing Frames",
    Stage.ANALYZING: "Analyzing Colors",
    Stage.ENCODING: "Encoding GIF",
    Stage.FINALIZING: "Finalizing",
    Stage.COMPLETED: "Complete",
    Stage.ERROR: "Error",
}

STAGE_MESSAGES = {
    Stage.CAPTURING: [
        "Reading video data...",
        "Extracting frames...",
        "Processing frame timings...",
        "Capturing pixel data...",
        "Organizing frame sequence...",
    ],
    Stage.ANALYZING: [
        "Scanning color distribution...",
        "Finding dominant colors...",
        "Building color histogram...",
        "Optimizing palette...",
        "Reducing to 256 colors...",
    ],
    Stage.ENCODING: [
        "Initializing encoder...",
        "Writing frame data...",
        "Applying compression...",
        "Optimizing frame deltas...",
        "Processing animations...",
    ],
    Stage.FINALIZING: [
        "Writing file headers...",
        "Optimizing file size...",
        "Preparing for download...",
        "Final quality checks...",
        "Almost ready...",
    ],
}

COMPLETED_MESSAGE = "GIF created successfully!"

# Share of the overall bar covered by the capture stage
CAPTURE_STAGE_SPAN = 100.0 / TOTAL_STAGES


def stage_base_progress(stage: Stage) -> float:
    return (stage.number - 1) / TOTAL_STAGES * 100


def buffered_percentage(source: VideoSourcePort) -> float:
    """Last buffered end relative to the source duration."""
    ranges = source.buffered()
    duration = source.duration
    if not ranges or not duration or not math.isfinite(duration) or duration <= 0:
        return 0.0
    return ranges[-1][1] / duration * 100


class StageProgressReporter:
    """Emits StageProgressInfo to an optional sink; never lets the sink fail a session."""

    def __init__(
        self,
        sink: Optional[ProgressSinkPort] = None,
        settings: ProgressSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sink = sink
        self._settings = settings or ProgressSettings()
        self._clock = clock
        self._stage: Optional[Stage] = None
        self._message_index = 0
        self._progress = 0.0
        self._timer: Optional[asyncio.Task] = None
        self._last_frame_emit: Optional[float] = None
        self._frame_times: deque[float] = deque(maxlen=self._settings.eta_window)
        self._latest: Optional[StageProgressInfo] = None
        self._latest_buffering: Optional[BufferingStatus] = None

    @property
    def stage(self) -> Optional[Stage]:
        return self._stage

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def latest(self) -> Optional[StageProgressInfo]:
        return self._latest

    # -- Stage transitions ---------------------------------------------------

    def enter_stage(self, stage: Stage) -> None:
        if stage.is_terminal:
            raise ValueError(f"{stage.value} is terminal; use complete() or fail()")
        self._stop_timer()
        self._stage = stage
        self._message_index = 0
        self._latest_buffering = None
        self._advance(stage_base_progress(stage))
        self._emit(self._build(STAGE_MESSAGES[stage][0]))
        self._start_timer()

    def report_frame(
        self,
        current_frame: int,
        total_frames: int,
        frame_duration_ms: float,
        source: Optional[VideoSourcePort] = None,
    ) -> None:
        """Record one captured frame; emits at most once per throttle window."""
        if self._stage is not Stage.CAPTURING:
            logger.debug("Frame %d reported outside the capture stage; not emitted", current_frame)
            return
        self._frame_times.append(frame_duration_ms)
        if total_frames > 0:
            self._advance(
                stage_base_progress(Stage.CAPTURING)
                + min(1.0, current_frame / total_frames) * CAPTURE_STAGE_SPAN
            )

        now = self._clock()
        throttle = self._settings.throttle_ms / 1000
        is_last = current_frame >= total_frames
        if not is_last and self._last_frame_emit is not None and now - self._last_frame_emit < throttle:
            return

        remaining = max(0, total_frames - current_frame)
        average = sum(self._frame_times) / len(self._frame_times)
        eta = max(0, math.ceil(remaining * average / 1000))

        percentage = 0.0
        if source is not None:
            try:
                percentage = buffered_percentage(source)
            except Exception as e:
                logger.debug("Could not read buffered ranges: %s", e)

        self._latest_buffering = BufferingStatus(
            current_frame=current_frame,
            total_frames=total_frames,
            buffered_percentage=percentage,
            estimated_time_remaining=eta,
            is_buffering=False,
        )
        self._last_frame_emit = now
        self._emit(self._build(f"Captured frame {current_frame}/{total_frames}"))

    def complete(self, encoder: Optional[str] = None) -> None:
        self._stop_timer()
        self._stage = None
        self._progress = 100.0
        info = StageProgressInfo(
            stage=Stage.COMPLETED,
            stage_number=Stage.COMPLETED.number,
            stage_name=STAGE_NAMES[Stage.COMPLETED],
            message=COMPLETED_MESSAGE,
            progress=100.0,
            encoder=encoder,
        )
        self._emit(info)

    def fail(self, error: BaseException | str) -> None:
        self._stop_timer()
        self._stage = None
        info = StageProgressInfo(
            stage=Stage.ERROR,
            stage_number=Stage.ERROR.number,
            stage_name=STAGE_NAMES[Stage.ERROR],
            message=str(error),
            progress=self._progress,
        )
        self._emit(info)

    def close(self) -> None:
        """Cancel the message timer and clear the current stage."""
        self._stop_timer()
        self._stage = None

    # -- Internals -----------------------------------------------------------

    def _advance(self, value: float) -> None:
        self._progress = max(self._progress, min(100.0, value))

    def _build(self, message: str) -> StageProgressInfo:
        stage = self._stage
        if stage is None:
            raise RuntimeError("No active stage to report progress for")
        return StageProgressInfo(
            stage=stage,
            stage_number=stage.number,
            stage_name=STAGE_NAMES[stage],
            message=message,
            progress=self._progress,
            buffering_status=self._latest_buffering if stage is Stage.CAPTURING else None,
        )

    def _emit(self, info: StageProgressInfo) -> None:
        self._latest = info
        if self._sink is None:
            return
        try:
            self._sink(info)
        except Exception as e:
            logger.warning("Progress sink failed: %s", e)

    def _start_timer(self) -> None:
        if self._settings.message_interval_ms <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.create_task(self._cycle_messages())

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _cycle_messages(self) -> None:
        interval = self._settings.message_interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            stage = self._stage
            if stage is None:
                return
            messages = STAGE_MESSAGES[stage]
            self._message_index = (self._message_index + 1) % len(messages)
            self._emit(self._build(messages[self._message_index]))
