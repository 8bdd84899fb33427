"""Port for handing finished GIFs to storage."""
from __future__ import annotations
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class GifStoragePort(Protocol):
    async def save_file(self, content: bytes, filename: str, directory: str = "") -> str: ...
    def get_file_path(self, filename: str, directory: str = "") -> Path: ...
