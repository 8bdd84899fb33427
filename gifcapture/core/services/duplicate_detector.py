"""
Duplicate frame detection.
A stalled source keeps presenting the same picture; sampling a subset of
pixels is enough to notice and cheap enough to run on every frame.
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np

from gifcapture.core.exceptions import StuckVideoError

DEFAULT_SIMILARITY_THRESHOLD = 0.98
DEFAULT_MAX_SAMPLES = 1000
MIN_DUPLICATE_BOUND = 5
MAX_DUPLICATE_BOUND = 30


def frame_similarity(a: np.ndarray, b: np.ndarray, max_samples: int = DEFAULT_MAX_SAMPLES) -> float:
    """Fraction of sampled pixels whose RGB channels match exactly.

    Buffers of different shapes are never similar. Alpha is ignored.
    """
    if a.shape != b.shape:
        return 0.0

    flat_a = a.reshape(-1)
    flat_b = b.reshape(-1)
    total_pixels = flat_a.size // 4
    sample_size = min(max_samples, total_pixels)
    if sample_size <= 0:
        return 0.0

    step = max(4, (flat_a.size // sample_size // 4) * 4)
    offsets = np.arange(0, flat_a.size, step)[:sample_size]

    rgb_a = np.stack([flat_a[offsets], flat_a[offsets + 1], flat_a[offsets + 2]], axis=1)
    rgb_b = np.stack([flat_b[offsets], flat_b[offsets + 1], flat_b[offsets + 2]], axis=1)
    matches = int(np.count_nonzero(np.all(rgb_a == rgb_b, axis=1)))
    return matches / len(offsets)


def duplicate_bound(
    frame_rate: float,
    min_bound: int = MIN_DUPLICATE_BOUND,
    max_bound: int = MAX_DUPLICATE_BOUND,
) -> int:
    """Consecutive duplicates tolerated before the source is declared stuck."""
    return max(min_bound, min(max_bound, math.ceil(frame_rate)))


class DuplicateDetector:
    """Similarity check plus the consecutive-duplicate counter of one session."""

    def __init__(
        self,
        frame_rate: float,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        min_bound: int = MIN_DUPLICATE_BOUND,
        max_bound: int = MAX_DUPLICATE_BOUND,
    ) -> None:
        self.threshold = threshold
        self.max_samples = max_samples
        self.bound = duplicate_bound(frame_rate, min_bound, max_bound)
        self.consecutive_count = 0

    def similarity(self, current: np.ndarray, previous: np.ndarray) -> float:
        return frame_similarity(current, previous, self.max_samples)

    def is_duplicate(self, current: np.ndarray, previous: Optional[np.ndarray]) -> bool:
        if previous is None:
            return False
        return self.similarity(current, previous) > self.threshold

    def register_duplicate(
        self,
        frame_index: Optional[int] = None,
        video_time: Optional[float] = None,
    ) -> int:
        """Count one more duplicate; raises StuckVideoError once the bound is reached."""
        self.consecutive_count += 1
        if self.consecutive_count >= self.bound:
            raise StuckVideoError(
                duplicate_count=self.consecutive_count,
                bound=self.bound,
                frame_index=frame_index,
                video_time=video_time,
            )
        return self.consecutive_count

    def reset(self) -> None:
        self.consecutive_count = 0
