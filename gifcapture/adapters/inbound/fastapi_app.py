"""
FastAPI application - primary inbound adapter.
Exposes the GIF pipeline over HTTP: start a capture, poll its progress and
download the result.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from gifcapture.infrastructure.config import get_settings
from gifcapture.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    setup_logging(settings.logging)
    logger.info("GifCapture API starting up...")
    from gifcapture.infrastructure.container import ApplicationContainer
    app.state.container = ApplicationContainer(settings)
    yield
    logger.info("GifCapture API shutting down...")


app = FastAPI(
    title="GifCapture API",
    description="Video segment to animated GIF capture pipeline",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log each request with method, path, status, and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    if request.url.path.startswith("/api"):
        response.headers["cache-control"] = "no-store, no-cache, must-revalidate"
    logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


from gifcapture.core.exceptions import (
    ConcurrentSessionError,
    EncodingError,
    InvalidRequestError,
    SeekTimeoutError,
    SourceUnavailableError,
    StuckVideoError,
    SurfaceUnavailableError,
)


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ConcurrentSessionError)
async def concurrent_session_handler(request: Request, exc: ConcurrentSessionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StuckVideoError)
async def stuck_video_handler(request: Request, exc: StuckVideoError):
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "duplicate_count": exc.duplicate_count,
            "frame_index": exc.frame_index,
        },
    )


@app.exception_handler(SourceUnavailableError)
async def source_unavailable_handler(request: Request, exc: SourceUnavailableError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(SeekTimeoutError)
async def seek_timeout_handler(request: Request, exc: SeekTimeoutError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(EncodingError)
async def encoding_error_handler(request: Request, exc: EncodingError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(SurfaceUnavailableError)
async def surface_error_handler(request: Request, exc: SurfaceUnavailableError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ── API routes ─────────────────────────────────────────────────

from gifcapture.adapters.inbound.api.captures import router as captures_router

app.include_router(captures_router, prefix="/api/captures", tags=["captures"])


@app.get("/api/health")
async def health(request: Request):
    container = request.app.state.container
    service = container.gif_pipeline_service()
    return {
        "status": "ok",
        "version": API_VERSION,
        "processing": service.is_processing,
        "encoders": container.encoder_factory().available_encoders(),
    }


@app.get("/api/download/{filename}")
async def download_gif(filename: str, request: Request):
    """Download a GIF produced by a previous capture."""
    storage = request.app.state.container.file_storage()
    path = storage.get_file_path(filename)
    if path.suffix.lower() != ".gif" or not path.exists():
        raise HTTPException(status_code=404, detail="GIF not found")
    return FileResponse(path, media_type="image/gif", filename=path.name)


def main() -> None:
    import uvicorn

    logger.info("Starting GifCapture API on %s:%d", settings.web.host, settings.web.port)
    uvicorn.run(
        "gifcapture.adapters.inbound.fastapi_app:app",
        host=settings.web.host,
        port=settings.web.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
