"""DTO for raw frame extraction without encoding."""
from __future__ import annotations
from dataclasses import dataclass, field

from gifcapture.core.entities.captured_frame import CapturedFrame


@dataclass
class ExtractionMetadata:
    total_frames: int = 0
    actual_frame_rate: float = 0.0
    width: int = 0
    height: int = 0
    duration: float = 0.0
    extraction_method: str = ""
    processing_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_frames": self.total_frames,
            "actual_frame_rate": self.actual_frame_rate,
            "dimensions": {"width": self.width, "height": self.height},
            "duration": self.duration,
            "extraction_method": self.extraction_method,
            "processing_time": self.processing_time,
        }


@dataclass
class FrameExtractionResult:
    frames: list[CapturedFrame] = field(default_factory=list)
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)
