"""OpenCV-backed video source.

Exposes a video file through :class:`VideoSourcePort` so the capture
pipeline can run against files on disk. Playback is simulated with a
monotonic clock; seeks land exactly on the requested position.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from gifcapture.core.exceptions import SourceUnavailableError
from gifcapture.ports.outbound.video_source_port import ReadyState

logger = logging.getLogger(__name__)


class OpenCVVideoSource:
    """Satisfies :class:`~gifcapture.ports.outbound.video_source_port.VideoSourcePort`."""

    def __init__(self, video_path: str | Path) -> None:
        self._path = str(video_path)
        self._cap = cv2.VideoCapture(self._path)
        if not self._cap.isOpened():
            raise SourceUnavailableError(f"Cannot open video file: {self._path}")

        self._fps: float = self._cap.get(cv2.CAP_PROP_FPS) or 0.0
        total_frames = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self._width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._duration = total_frames / self._fps if self._fps > 0 else 0.0

        self._position = 0.0
        self._paused = True
        self._play_started: Optional[float] = None
        self._cached_position: Optional[float] = None
        self._cached_frame: Optional[np.ndarray] = None
        logger.info(
            "Opened %s - %dx%d, %.2f fps, %.2fs", self._path, self._width, self._height,
            self._fps, self._duration,
        )

    # -- Playback state --------------------------------------------------------

    @property
    def current_time(self) -> float:
        if not self._paused and self._play_started is not None:
            elapsed = time.monotonic() - self._play_started
            return min(self._duration, self._position + elapsed)
        return self._position

    @current_time.setter
    def current_time(self, value: float) -> None:
        self._position = max(0.0, min(float(value), self._duration))
        if not self._paused:
            self._play_started = time.monotonic()

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        if not self._paused:
            self._position = self.current_time
            self._paused = True
            self._play_started = None

    def play(self) -> None:
        if self._paused:
            self._paused = False
            self._play_started = time.monotonic()

    # -- Media properties ------------------------------------------------------

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
        if self._cap is None or not self._cap.isOpened():
            return ReadyState.HAVE_NOTHING
        return ReadyState.HAVE_ENOUGH_DATA

    def buffered(self) -> list[tuple[float, float]]:
        return [(0.0, self._duration)] if self._duration > 0 else []

    # -- Rendering -------------------------------------------------------------

    def draw_frame(self, surface: np.ndarray) -> None:
        """Decode the frame at the current position, scaled into *surface* as RGBA."""
        if self._cap is None:
            raise SourceUnavailableError(f"Video source closed: {self._path}")
        position = self.current_time
        frame = self._decode(position)
        height, width = surface.shape[:2]
        if (frame.shape[1], frame.shape[0]) != (width, height):
            frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_AREA)
        np.copyto(surface, cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA))

    def _decode(self, position: float) -> np.ndarray:
        if self._cached_frame is not None and self._cached_position == position:
            return self._cached_frame

        if self._fps > 0:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, int(position * self._fps))
        else:
            self._cap.set(cv2.CAP_PROP_POS_MSEC, position * 1000)
        ret, frame = self._cap.read()
        if not ret:
            raise SourceUnavailableError(
                f"Failed to read frame at {position:.2f}s from {self._path}"
            )
        self._cached_position = position
        self._cached_frame = frame
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self._cached_frame = None

    def __enter__(self) -> OpenCVVideoSource:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
