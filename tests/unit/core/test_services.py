"""Unit tests for core domain services (pure logic)."""
from __future__ import annotations

import numpy as np
import pytest

from gifcapture.core.entities.capture_request import CaptureRequest
from gifcapture.core.exceptions import InvalidRequestError, StuckVideoError
from gifcapture.core.services.duplicate_detector import (
    DuplicateDetector,
    duplicate_bound,
    frame_similarity,
)
from gifcapture.core.services.frame_scheduler import FrameScheduler, floor_even, round_half_up


def _solid(r: int, g: int = 0, b: int = 0, a: int = 255, shape=(36, 64)) -> np.ndarray:
    surface = np.empty((*shape, 4), dtype=np.uint8)
    surface[...] = (r, g, b, a)
    return surface


class TestRounding:
    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_floor_even(self):
        assert floor_even(281) == 280
        assert floor_even(360) == 360


class TestFrameScheduler:
    """Tests for timestamps and output dimensions."""

    @pytest.fixture
    def scheduler(self):
        return FrameScheduler()

    def test_two_seconds_at_five_fps(self, scheduler):
        req = CaptureRequest(start_time=1.0, end_time=3.0, frame_rate=5.0, target_width=640, target_height=360)
        schedule = scheduler.schedule(req, 1920, 1080)
        assert schedule.frame_count == 10
        assert schedule.frame_interval == pytest.approx(0.2)
        assert schedule.target_timestamp(0) == 1.0
        assert schedule.target_timestamp(9) == pytest.approx(2.8)

    def test_partial_frame_rounds_count_up(self, scheduler):
        req = CaptureRequest(start_time=0.0, end_time=1.1, frame_rate=2.0)
        schedule = scheduler.schedule(req, 640, 360)
        assert schedule.frame_count == 3
        assert schedule.frame_interval == pytest.approx(1.1 / 3)
        assert schedule.end_time == pytest.approx(1.1)

    def test_matching_aspect_keeps_target(self, scheduler):
        assert scheduler.output_dimensions(1920, 1080, 640, 360) == (640, 360)

    def test_within_tolerance_keeps_target(self, scheduler):
        # 1.7777 vs 1.7647: ~0.7% apart
        assert scheduler.output_dimensions(1920, 1080, 480, 272) == (480, 272)

    def test_wide_source_fits_width(self, scheduler):
        assert scheduler.output_dimensions(1920, 1080, 500, 500) == (500, 280)

    def test_tall_source_fits_height(self, scheduler):
        assert scheduler.output_dimensions(1080, 1920, 500, 500) == (280, 500)

    def test_dimensions_are_even(self, scheduler):
        width, height = scheduler.output_dimensions(1000, 333, 301, 301)
        assert width % 2 == 0 and height % 2 == 0

    def test_idempotent(self, scheduler):
        first = scheduler.output_dimensions(1920, 800, 480, 480)
        assert scheduler.output_dimensions(1920, 800, *first) == first

    def test_collapse_raises(self, scheduler):
        with pytest.raises(InvalidRequestError):
            scheduler.output_dimensions(4000, 10, 100, 100)

    def test_invalid_source_raises(self, scheduler):
        req = CaptureRequest(start_time=0.0, end_time=1.0)
        with pytest.raises(InvalidRequestError):
            scheduler.schedule(req, 0, 360)

    def test_invalid_request_raises(self, scheduler):
        req = CaptureRequest(start_time=2.0, end_time=1.0)
        with pytest.raises(InvalidRequestError):
            scheduler.schedule(req, 640, 360)


class TestFrameSimilarity:
    """Tests for sampled pixel similarity."""

    def test_identical(self):
        a = _solid(10, 20, 30)
        assert frame_similarity(a, a.copy()) == 1.0

    def test_different(self):
        assert frame_similarity(_solid(10), _solid(11)) == 0.0

    def test_shape_mismatch(self):
        assert frame_similarity(_solid(10), _solid(10, shape=(36, 62))) == 0.0

    def test_alpha_ignored(self):
        assert frame_similarity(_solid(10, a=255), _solid(10, a=0)) == 1.0

    def test_partial_match(self):
        a = _solid(10)
        b = a.copy()
        b[: b.shape[0] // 2] = (99, 99, 99, 255)
        similarity = frame_similarity(a, b)
        assert 0.3 < similarity < 0.7

    def test_small_buffer_samples_every_pixel(self):
        a = _solid(0, shape=(2, 2))
        b = a.copy()
        b[0, 0] = (1, 0, 0, 255)
        assert frame_similarity(a, b, max_samples=1000) == 0.75


class TestDuplicateDetector:
    """Tests for the consecutive duplicate counter."""

    def test_bound(self):
        assert duplicate_bound(2) == 5
        assert duplicate_bound(12.5) == 13
        assert duplicate_bound(60) == 30
        assert DuplicateDetector(frame_rate=5).bound == 5

    def test_bound_limits_are_configurable(self):
        assert duplicate_bound(2, min_bound=3, max_bound=10) == 3
        assert DuplicateDetector(frame_rate=24, min_bound=5, max_bound=10).bound == 10

    def test_first_frame_never_duplicate(self):
        detector = DuplicateDetector(frame_rate=5)
        assert not detector.is_duplicate(_solid(1), None)

    def test_is_duplicate(self):
        detector = DuplicateDetector(frame_rate=5)
        assert detector.is_duplicate(_solid(1), _solid(1))
        assert not detector.is_duplicate(_solid(1), _solid(2))

    def test_bound_minus_one_duplicates_tolerated(self):
        detector = DuplicateDetector(frame_rate=5)
        for expected in range(1, 5):
            assert detector.register_duplicate() == expected

    def test_bound_reached_raises(self):
        detector = DuplicateDetector(frame_rate=5)
        for _ in range(4):
            detector.register_duplicate()
        with pytest.raises(StuckVideoError) as exc_info:
            detector.register_duplicate(frame_index=7, video_time=1.5)
        assert exc_info.value.duplicate_count == 5
        assert exc_info.value.bound == 5
        assert exc_info.value.frame_index == 7
        assert "Video buffering stuck" in str(exc_info.value)

    def test_reset(self):
        detector = DuplicateDetector(frame_rate=5)
        for _ in range(4):
            detector.register_duplicate()
        detector.reset()
        assert detector.consecutive_count == 0
        assert detector.register_duplicate() == 1
