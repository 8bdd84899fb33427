"""DTO for a finished GIF and its metadata."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass
class EncodingMetadata:
    file_size: int
    duration: float
    frame_count: int
    width: int
    height: int
    encoder: str
    id: str
    extraction_method: str
    actual_frame_rate: float
    encoding_time: Optional[float] = None
    average_frame_time: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "file_size": self.file_size,
            "duration": self.duration,
            "frame_count": self.frame_count,
            "width": self.width,
            "height": self.height,
            "encoder": self.encoder,
            "id": self.id,
            "extraction_method": self.extraction_method,
            "actual_frame_rate": self.actual_frame_rate,
            "encoding_time": self.encoding_time,
            "average_frame_time": self.average_frame_time,
        }


@dataclass
class EncodingResult:
    blob: bytes
    metadata: EncodingMetadata

    def to_dict(self) -> dict:
        return {"size": len(self.blob), "metadata": self.metadata.to_dict()}
