"""
Capture API routes.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from gifcapture.core.entities.capture_request import CaptureRequest
from gifcapture.core.value_objects.text_overlay import TextOverlay
from gifcapture.ports.inbound.capture_gif_use_case import CaptureGifUseCase

logger = logging.getLogger(__name__)

router = APIRouter()


class TextOverlayBody(BaseModel):
    text: str
    x_percent: float = 50.0
    y_percent: float = 90.0
    font_size: int = 24
    font_family: str = "DejaVuSans.ttf"
    color: str = "#ffffff"
    stroke_color: Optional[str] = None
    stroke_width: Optional[int] = None


class CaptureBody(BaseModel):
    video_path: str
    start_time: float
    end_time: float
    frame_rate: float = 5.0
    target_width: int = 480
    target_height: int = 270
    quality: str = "medium"
    text_overlays: list[TextOverlayBody] = Field(default_factory=list)
    filename: Optional[str] = None

    def to_request(self) -> CaptureRequest:
        return CaptureRequest(
            start_time=self.start_time,
            end_time=self.end_time,
            frame_rate=self.frame_rate,
            target_width=self.target_width,
            target_height=self.target_height,
            quality=self.quality,
            text_overlays=[TextOverlay.from_dict(o.model_dump()) for o in self.text_overlays],
        )


def _resolve_video(video_path: str, video_dir: str, allowed: list[str]) -> Path:
    """Resolve *video_path* inside the configured video directory."""
    root = Path(video_dir).resolve()
    path = (root / video_path).resolve()
    if root not in path.parents:
        raise HTTPException(status_code=400, detail="Video path escapes the video directory")
    if path.suffix.lower() not in allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{path.suffix}'. Allowed: {', '.join(sorted(allowed))}",
        )
    if not path.exists():
        raise HTTPException(status_code=404, detail="Video not found")
    return path


@router.post("")
async def create_capture(body: CaptureBody, request: Request):
    """Capture a segment of a stored video and encode it to a GIF."""
    container = request.app.state.container
    settings = container.settings
    service: CaptureGifUseCase = container.gif_pipeline_service()

    capture_request = body.to_request()
    capture_request.validate()
    video = _resolve_video(body.video_path, settings.web.video_dir, settings.web.allowed_extensions)

    tracker = container.progress_tracker()
    source = container.video_source(video)
    try:
        result = await service.process_video_to_gif(
            source,
            capture_request,
            on_progress=tracker,
            diagnostics=container.diagnostics(),
        )
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()

    filename = body.filename
    if filename and not filename.lower().endswith(".gif"):
        filename = f"{filename}.gif"
    saved = await service.download_gif(result.blob, filename)
    name = Path(saved).name
    logger.info("Capture of %s stored as %s", video.name, name)
    return {
        "filename": name,
        "download_url": f"/api/download/{name}",
        "metadata": result.metadata.to_dict(),
    }


@router.get("/progress")
async def capture_progress(request: Request):
    """Latest progress of the current (or last) capture."""
    latest = request.app.state.container.progress_tracker().latest
    if latest is None:
        return {"stage": None, "progress": 0}
    return latest.to_dict()


@router.get("/diagnostics")
async def capture_diagnostics(request: Request):
    collector = request.app.state.container.diagnostics()
    if collector is None:
        raise HTTPException(status_code=404, detail="Diagnostics disabled")
    return collector.summary()
