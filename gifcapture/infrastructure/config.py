"""
GifCapture configuration using Pydantic Settings.
Every timing constant of the capture pipeline can be overridden from the
environment or a .env file.
"""

from __future__ import annotations

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env before any BaseSettings subclass reads env vars
load_dotenv()


class CaptureSettings(BaseSettings):
    """Seek, poll and recovery timing for the verified capture loop."""

    seek_settle_ms: int = 50
    poll_attempts: int = 20
    poll_interval_ms: int = 25
    seek_tolerance: float = 0.05
    stall_min_attempts: int = 5
    stall_epsilon: float = 0.001
    long_seek_threshold: float = 2.0
    long_seek_settle_ms: int = 150
    short_seek_settle_ms: int = 100
    inaccuracy_warning: float = 0.1
    recovery_min_offset: float = 0.01
    recovery_nudge: float = 0.001
    recovery_wait_ms: int = 200
    aspect_tolerance: float = 0.02

    model_config = {"env_prefix": "CAPTURE_"}


class DuplicateSettings(BaseSettings):
    similarity_threshold: float = 0.98
    max_samples: int = 1000
    min_bound: int = 5
    max_bound: int = 30

    model_config = {"env_prefix": "DUPLICATE_"}


class ProgressSettings(BaseSettings):
    message_interval_ms: int = 3000
    throttle_ms: int = 500
    eta_window: int = 5

    model_config = {"env_prefix": "PROGRESS_"}


class FallbackSettings(BaseSettings):
    min_deadline_ms: int = 60000
    per_frame_budget_ms: int = 500
    deadline_overhead_ms: int = 30000
    initial_seek_wait_ms: int = 200
    frame_wait_ms: int = 50
    enabled: bool = True

    model_config = {"env_prefix": "FALLBACK_"}


class PipelineSettings(BaseSettings):
    analyzing_pause_ms: int = 1000
    finalizing_pause_ms: int = 500

    model_config = {"env_prefix": "PIPELINE_"}


class EncoderSettings(BaseSettings):
    preferred: str = "auto"  # "auto", "ffmpeg-palette", "pillow-mediancut", "pillow-fastoctree"
    loop: bool = True
    use_ffmpeg: bool = True
    ffmpeg_path: Optional[str] = None

    model_config = {"env_prefix": "ENCODER_"}


class StorageSettings(BaseSettings):
    output_dir: str = "./media/gifs"
    default_filename_prefix: str = "gif"

    model_config = {"env_prefix": "STORAGE_"}


class DiagnosticsSettings(BaseSettings):
    enabled: bool = False
    max_events: int = 1000

    model_config = {"env_prefix": "DIAGNOSTICS_"}


class WebSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    video_dir: str = "./media/videos"
    allowed_extensions: list[str] = Field(default_factory=lambda: [".mp4", ".mkv", ".avi", ".mov", ".webm"])

    model_config = {"env_prefix": "WEB_"}


class LoggingSettings(BaseSettings):
    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    # Pillow logs every plugin import at DEBUG
    quiet_loggers: list[str] = Field(default_factory=lambda: ["PIL", "httpcore", "multipart"])

    model_config = {"env_prefix": "LOG_"}


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    app_env: str = "development"

    # Capture pipeline
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    duplicates: DuplicateSettings = Field(default_factory=DuplicateSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    encoder: EncoderSettings = Field(default_factory=EncoderSettings)

    # Output
    storage: StorageSettings = Field(default_factory=StorageSettings)
    diagnostics: DiagnosticsSettings = Field(default_factory=DiagnosticsSettings)

    # Web server
    web: WebSettings = Field(default_factory=WebSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def deadline_ms(self, frame_count: int) -> int:
        """Time budget of the verified capture loop before the fallback takes over."""
        return max(
            self.fallback.min_deadline_ms,
            frame_count * self.fallback.per_frame_budget_ms + self.fallback.deadline_overhead_ms,
        )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
