"""Persistent key/value store shared by several keys.

The desktop counterpart of a browser's local storage: one SQLite file holds
values for many keys, and each LocalStore owns exactly one of them.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

from kite_api.constants import DEFAULT_LOCAL_DB_PATH

logger = logging.getLogger(__name__)


class LocalStore:
    """Blob stored under a single key of a shared SQLite table."""

    def __init__(self, key: str, db_path: Path | str | None = None):
        """Initialize the store.

        Args:
            key: Storage key owned by this store
            db_path: Path to SQLite database file
        """
        self.key = key
        self.db_path = Path(db_path) if db_path else DEFAULT_LOCAL_DB_PATH

    async def set(self, content: str) -> None:
        """Write the blob under this store's key.

        Raises:
            sqlite3.Error: If the database cannot be written
        """
        await asyncio.to_thread(self._write, content)

    async def get(self) -> str | None:
        """Read the blob, or None if the key is unset or the read failed."""
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, sqlite3.Error) as e:
            logger.debug(f"Could not read key {self.key!r} from {self.db_path}: {e}")
            return None

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=10.0)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _read(self) -> str | None:
        if not self.db_path.exists():
            return None
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT value FROM storage WHERE key = ?",
                (self.key,),
            ).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def _write(self, content: str) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_connection()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO storage (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (self.key, content),
                )
        finally:
            conn.close()
