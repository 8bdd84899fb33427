"""Domain events raised while frames are being captured."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class FrameCaptured:
    """One accepted frame, as seen by the diagnostics collector."""
    session_id: str
    frame_index: int
    target_timestamp: float
    actual_timestamp: float
    is_duplicate: bool
    seek_attempts: int = 0
    stalled: bool = False
    recovered: bool = False
    similarity: Optional[float] = None
    capture_ms: float = 0.0
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class CaptureFallbackTriggered:
    session_id: str
    reason: str
    frames_discarded: int
    timestamp: datetime = field(default_factory=datetime.utcnow)
