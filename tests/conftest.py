"""Shared test fixtures for all tests."""
from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import pytest
from unittest.mock import MagicMock

from gifcapture.adapters.outbound.encoders.encoder_factory import EncoderFactory
from gifcapture.adapters.outbound.persistence.local_file_storage import LocalGifStorage
from gifcapture.application.dto.encoder_frame import EncodedGif, EncodeOptions, EncoderFrame
from gifcapture.application.encoder_adapter import EncoderAdapter
from gifcapture.application.fallback_capture import FallbackCapture
from gifcapture.application.frame_capture_service import FrameCaptureService
from gifcapture.application.gif_pipeline_service import GifPipelineService
from gifcapture.application.seek_controller import SeekController
from gifcapture.core.entities.capture_request import CaptureRequest
from gifcapture.infrastructure.config import (
    CaptureSettings,
    EncoderSettings,
    FallbackSettings,
    PipelineSettings,
    ProgressSettings,
    Settings,
    StorageSettings,
)
from gifcapture.ports.outbound.video_source_port import ReadyState


# ── Fake video source ──────────────────────────────────────────────────────

def color_for(key: float) -> tuple[int, int, int]:
    """Distinct RGB color per millisecond of *key*."""
    value = int(round(key * 1000))
    return value & 0xFF, (value >> 8) & 0xFF, (value >> 16) & 0xFF


class FakeVideoSource:
    """In-memory VideoSourcePort that paints each timestamp a distinct solid color.

    ``stuck`` ignores every seek; ``lagging_targets`` ignores seeks that land
    exactly on one of the listed timestamps; ``renderer`` maps the position to
    the key used for the color.
    """

    def __init__(
        self,
        width: int = 640,
        height: int = 360,
        duration: float = 10.0,
        current_time: float = 0.0,
        paused: bool = True,
        ready_state: int = ReadyState.HAVE_ENOUGH_DATA,
        stuck: bool = False,
        seek_offset: float = 0.0,
        lagging_targets: tuple[float, ...] = (),
        renderer: Optional[Callable[[float], float]] = None,
        buffered_ranges: Optional[list[tuple[float, float]]] = None,
        fail_on_draw: int = 0,
    ) -> None:
        self._width = width
        self._height = height
        self._duration = duration
        self._time = current_time
        self._paused = paused
        self._ready_state = ready_state
        self.stuck = stuck
        self.seek_offset = seek_offset
        self.lagging_targets = lagging_targets
        self.renderer = renderer or (lambda t: t)
        self._buffered = buffered_ranges if buffered_ranges is not None else [(0.0, duration)]
        self.fail_on_draw = fail_on_draw
        self.seek_log: list[float] = []
        self.draw_count = 0
        self.play_calls = 0
        self.pause_calls = 0
        self.closed = False

    @property
    def current_time(self) -> float:
        return self._time

    @current_time.setter
    def current_time(self, value: float) -> None:
        self.seek_log.append(value)
        if self.stuck:
            return
        if any(abs(value - t) < 1e-9 for t in self.lagging_targets):
            return
        self._time = min(max(0.0, value + self.seek_offset), self._duration)

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self.pause_calls += 1
        self._paused = True

    def play(self) -> None:
        self.play_calls += 1
        self._paused = False

    @property
    def video_width(self) -> int:
        return self._width

    @property
    def video_height(self) -> int:
        return self._height

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def ready_state(self) -> int:
        return self._ready_state

    def buffered(self) -> list[tuple[float, float]]:
        return list(self._buffered)

    def draw_frame(self, surface: np.ndarray) -> None:
        self.draw_count += 1
        if self.fail_on_draw and self.draw_count >= self.fail_on_draw:
            raise RuntimeError("decoder crashed")
        r, g, b = color_for(self.renderer(self._time))
        surface[..., 0] = r
        surface[..., 1] = g
        surface[..., 2] = b
        surface[..., 3] = 255

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_source() -> Callable[..., FakeVideoSource]:
    return FakeVideoSource


# ── Fake encoder ───────────────────────────────────────────────────────────

class FakeGifEncoder:
    """GifEncoderPort that records what it was asked to encode."""

    def __init__(self, name: str = "fake", error: Optional[Exception] = None) -> None:
        self.name = name
        self.error = error
        self.calls: list[tuple[list[EncoderFrame], EncodeOptions]] = []

    def is_available(self) -> bool:
        return True

    def encode(self, frames: list[EncoderFrame], options: EncodeOptions) -> EncodedGif:
        self.calls.append((frames, options))
        if self.error is not None:
            raise self.error
        return EncodedGif(
            data=b"GIF89a" + bytes(len(frames)),
            encoder=self.name,
            width=options.width,
            height=options.height,
            frame_count=len(frames),
        )


@pytest.fixture
def make_encoder() -> type[FakeGifEncoder]:
    return FakeGifEncoder


@pytest.fixture
def fake_encoder() -> FakeGifEncoder:
    return FakeGifEncoder()


# ── Settings ───────────────────────────────────────────────────────────────

@pytest.fixture
def fast_settings(tmp_path) -> Settings:
    """Settings with every pipeline delay set to zero."""
    return Settings(
        capture=CaptureSettings(
            seek_settle_ms=0,
            poll_interval_ms=0,
            long_seek_settle_ms=0,
            short_seek_settle_ms=0,
            recovery_wait_ms=0,
        ),
        progress=ProgressSettings(message_interval_ms=0, throttle_ms=0),
        fallback=FallbackSettings(initial_seek_wait_ms=0, frame_wait_ms=0),
        pipeline=PipelineSettings(analyzing_pause_ms=0, finalizing_pause_ms=0),
        encoder=EncoderSettings(preferred="pillow-mediancut", use_ffmpeg=False),
        storage=StorageSettings(output_dir=str(tmp_path / "gifs")),
    )


# ── Pipeline ───────────────────────────────────────────────────────────────

@pytest.fixture
def mock_compositor():
    compositor = MagicMock()
    compositor.apply_overlays.return_value = None
    return compositor


@pytest.fixture
def make_pipeline(fast_settings, fake_encoder, mock_compositor):
    def _make(settings: Optional[Settings] = None, encoder=None, compositor=None) -> GifPipelineService:
        settings = settings or fast_settings
        return GifPipelineService(
            capture_service=FrameCaptureService(SeekController(settings.capture), settings.capture),
            fallback=FallbackCapture(settings.fallback),
            encoder=EncoderAdapter(EncoderFactory([encoder or fake_encoder], preferred="auto")),
            compositor=compositor or mock_compositor,
            storage=LocalGifStorage(settings.storage.output_dir),
            settings=settings,
        )
    return _make


@pytest.fixture
def sample_request() -> CaptureRequest:
    """2 seconds at 5 fps: 10 frames, 0.2s apart."""
    return CaptureRequest(start_time=1.0, end_time=3.0, frame_rate=5.0)
