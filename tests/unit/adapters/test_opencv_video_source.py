"""Tests for the OpenCV-backed video source."""
from __future__ import annotations

import cv2
import numpy as np
import pytest

from gifcapture.adapters.outbound.media.opencv_video_source import OpenCVVideoSource
from gifcapture.core.exceptions import SourceUnavailableError
from gifcapture.ports.outbound.video_source_port import ReadyState, VideoSourcePort


@pytest.fixture
def video_file(tmp_path):
    """Two seconds of 10 fps MJPG video; the blue channel encodes the frame number."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG")
    for i in range(20):
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        frame[..., 0] = i * 12
        writer.write(frame)
    writer.release()
    return path


class TestOpenCVVideoSource:
    """Tests for OpenCVVideoSource."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError):
            OpenCVVideoSource(tmp_path / "missing.mp4")

    def test_metadata(self, video_file):
        with OpenCVVideoSource(video_file) as source:
            assert isinstance(source, VideoSourcePort)
            assert (source.video_width, source.video_height) == (64, 48)
            assert source.duration == pytest.approx(2.0, abs=0.15)
            assert source.ready_state == ReadyState.HAVE_ENOUGH_DATA
            assert source.buffered() == [(0.0, source.duration)]
            assert source.paused

    def test_seek_is_clamped(self, video_file):
        with OpenCVVideoSource(video_file) as source:
            source.current_time = 1.3
            assert source.current_time == 1.3
            source.current_time = -4
            assert source.current_time == 0.0
            source.current_time = 99
            assert source.current_time == source.duration

    def test_draw_frame_scales_into_surface(self, video_file):
        with OpenCVVideoSource(video_file) as source:
            surface = np.zeros((24, 32, 4), dtype=np.uint8)
            source.current_time = 0.0
            source.draw_frame(surface)
            early = int(surface[..., 2].mean())
            assert (surface[..., 3] == 255).all()

            source.current_time = 1.5
            source.draw_frame(surface)
            late = int(surface[..., 2].mean())
            assert late > early + 100

    def test_play_advances_clock(self, video_file):
        with OpenCVVideoSource(video_file) as source:
            source.current_time = 0.5
            source.play()
            assert not source.paused
            assert source.current_time >= 0.5
            source.pause()
            paused_at = source.current_time
            assert source.current_time == paused_at

    def test_closed_source(self, video_file):
        source = OpenCVVideoSource(video_file)
        source.close()
        assert source.ready_state == ReadyState.HAVE_NOTHING
        with pytest.raises(SourceUnavailableError):
            source.draw_frame(np.zeros((4, 4, 4), dtype=np.uint8))
