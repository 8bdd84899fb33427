"""Local filesystem implementation of GifStoragePort."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalGifStorage:
    """Implements :class:`GifStoragePort` using the local filesystem.

    All paths are resolved relative to a configurable *base_dir*.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self._base = Path(base_dir).resolve()
        self._base.mkdir(parents=True, exist_ok=True)
        logger.info("LocalGifStorage initialised at %s", self._base)

    @property
    def base_dir(self) -> Path:
        return self._base

    # -- helpers ---------------------------------------------------------------

    def _resolve(self, filename: str, directory: str = "") -> Path:
        """Return an absolute path under the base directory; refuses to escape it."""
        root = self._base / directory if directory else self._base
        target = (root / filename).resolve()
        if self.base_dir not in target.parents:
            raise ValueError(f"Refusing path outside storage root: {filename}")
        return target

    # -- GifStoragePort implementation -----------------------------------------

    async def save_file(
        self, content: bytes, filename: str, directory: str = ""
    ) -> str:
        """Write *content* to disk and return the absolute path as a string."""
        target = self._resolve(filename, directory)
        target.parent.mkdir(parents=True, exist_ok=True)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, target.write_bytes, content)
        logger.debug("Saved file %s (%d bytes)", target, len(content))
        return str(target)

    def get_file_path(self, filename: str, directory: str = "") -> Path:
        """Return the :class:`Path` object for a given filename."""
        return self._resolve(filename, directory)
