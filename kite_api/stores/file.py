"""File-backed store."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStore:
    """Persists the blob in a single UTF-8 file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def set(self, content: str) -> None:
        """Write the blob, creating parent directories as needed.

        Raises:
            OSError: If the file cannot be written
        """
        await asyncio.to_thread(self._write, content)

    async def get(self) -> str | None:
        """Read the blob, or None if the file is missing or unreadable."""
        try:
            return await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read {self.path}: {e}")
            return None

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content, encoding="utf-8")
