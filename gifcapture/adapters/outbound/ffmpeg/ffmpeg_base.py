"""
Shared FFmpeg path resolution and command execution utilities.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

# Common install locations when ffmpeg is not on PATH
_KNOWN_FFMPEG_PATHS = [
    "/usr/local/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
    r"C:\Program Files\ffmpeg\bin\ffmpeg.exe",
    r"C:\ffmpeg\bin\ffmpeg.exe",
]


def get_ffmpeg_path(override: Optional[str] = None) -> Optional[str]:
    """Resolve the ffmpeg executable. Checks an explicit path, then PATH, then known locations."""
    if override:
        return override if os.path.exists(override) or shutil.which(override) else None

    path = shutil.which("ffmpeg")
    if path:
        return path

    for candidate in _KNOWN_FFMPEG_PATHS:
        if os.path.exists(candidate):
            logger.info("Found FFmpeg at: %s", candidate)
            return candidate

    return None


def run_ffmpeg_pipe(
    args: list[str],
    stdin: bytes,
    *,
    ffmpeg_path: Optional[str] = None,
    timeout: Optional[int] = None,
) -> bytes:
    """Run FFmpeg with binary stdin and return its binary stdout."""
    binary = ffmpeg_path or get_ffmpeg_path() or "ffmpeg"
    cmd = [binary, "-y", "-hide_banner", "-loglevel", "error", *args]
    logger.debug("Running: %s (%d bytes on stdin)", " ".join(cmd), len(stdin))
    result = subprocess.run(cmd, input=stdin, capture_output=True, timeout=timeout)
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        logger.error("FFmpeg error: %s", stderr)
        raise RuntimeError(f"FFmpeg failed (rc={result.returncode}): {stderr[:500]}")
    return result.stdout
