"""Progress sinks: log every update and keep the latest one for polling."""
from __future__ import annotations

import logging
from typing import Optional

from gifcapture.core.value_objects.stage_progress import StageProgressInfo

logger = logging.getLogger(__name__)


class LoggingProgressSink:
    def __call__(self, info: StageProgressInfo) -> None:
        logger.info(
            "[%d/%d] %s - %s (%.0f%%)",
            info.stage_number, info.total_stages, info.stage_name, info.message, info.progress,
        )


class ProgressTracker:
    """Remembers the latest StageProgressInfo; optionally forwards to another sink."""

    def __init__(self, forward: Optional[LoggingProgressSink] = None) -> None:
        self._latest: Optional[StageProgressInfo] = None
        self._forward = forward

    def __call__(self, info: StageProgressInfo) -> None:
        self._latest = info
        if self._forward is not None:
            self._forward(info)

    @property
    def latest(self) -> Optional[StageProgressInfo]:
        return self._latest

    def reset(self) -> None:
        self._latest = None
