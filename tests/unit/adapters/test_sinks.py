"""Tests for the progress sinks and the diagnostics collector."""
from __future__ import annotations

import logging

from gifcapture.adapters.outbound.diagnostics.in_memory_frame_collector import InMemoryFrameCollector
from gifcapture.adapters.outbound.progress.progress_tracker import LoggingProgressSink, ProgressTracker
from gifcapture.core.events.capture_events import CaptureFallbackTriggered, FrameCaptured
from gifcapture.core.value_objects.stage_progress import Stage, StageProgressInfo


def _info(progress: float = 10.0) -> StageProgressInfo:
    return StageProgressInfo(
        stage=Stage.CAPTURING, stage_number=1, stage_name="Capturing Frames",
        message="Reading video data...", progress=progress,
    )


def _frame_event(index: int, **kwargs) -> FrameCaptured:
    defaults = dict(
        session_id="gif_test", frame_index=index, target_timestamp=index * 0.2,
        actual_timestamp=index * 0.2, is_duplicate=False,
    )
    defaults.update(kwargs)
    return FrameCaptured(**defaults)


class TestProgressTracker:
    def test_keeps_latest_and_forwards(self):
        forwarded = []
        tracker = ProgressTracker(forward=forwarded.append)
        tracker(_info(5))
        tracker(_info(20))
        assert tracker.latest.progress == 20
        assert len(forwarded) == 2

    def test_reset(self):
        tracker = ProgressTracker()
        tracker(_info())
        tracker.reset()
        assert tracker.latest is None

    def test_logging_sink(self, caplog):
        with caplog.at_level(logging.INFO, logger="gifcapture.adapters.outbound.progress.progress_tracker"):
            LoggingProgressSink()(_info(12.5))
        assert "[1/4] Capturing Frames - Reading video data..." in caplog.text


class TestInMemoryFrameCollector:
    """Tests for InMemoryFrameCollector."""

    def test_empty_summary(self):
        summary = InMemoryFrameCollector().summary()
        assert summary["frames"] == 0
        assert summary["fallbacks"] == 0

    def test_summary(self):
        collector = InMemoryFrameCollector()
        collector.record(_frame_event(0))
        collector.record(_frame_event(1, is_duplicate=True, stalled=True, actual_timestamp=0.0))
        collector.record(_frame_event(2, recovered=True, actual_timestamp=0.45))
        collector.record(CaptureFallbackTriggered(session_id="gif_test", reason="deadline", frames_discarded=3))

        summary = collector.summary()
        assert summary["frames"] == 3
        assert summary["duplicates"] == 1
        assert summary["stalled"] == 1
        assert summary["recovered"] == 1
        assert summary["fallbacks"] == 1
        assert summary["max_seek_error"] == 0.2
        assert len(collector.events) == 4

    def test_bounded(self):
        collector = InMemoryFrameCollector(max_events=2)
        for i in range(5):
            collector.record(_frame_event(i))
        assert [e.frame_index for e in collector.frames] == [3, 4]

    def test_clear(self):
        collector = InMemoryFrameCollector()
        collector.record(_frame_event(0))
        collector.clear()
        assert collector.events == []
