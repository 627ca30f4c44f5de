"""Kite API client configuration.

Configuration is loaded from:
1. Keyword arguments
2. Environment variables (prefixed with KITE_)
3. ~/.kite-api/.env file

Key settings:
- KITE_HOST / KITE_PORT: where the local daemon listens
- KITE_EDITOR: editor identifier sent with buffer requests
- KITE_STORE: editor config backend (memory, file or local)
- KITE_MAX_FILE_SIZE: buffers above this size are never sent to the daemon
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kite_api.constants import (
    DATA_DIR,
    DEFAULT_CONFIG_PATH,
    DEFAULT_EDITOR,
    DEFAULT_HOST,
    DEFAULT_LOCAL_DB_PATH,
    DEFAULT_LOCAL_KEY,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    MAX_PAYLOAD_SIZE,
)


class Settings(BaseSettings):
    """Kite API client settings."""

    # Daemon
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    request_debug: bool = False

    # Editor
    editor: str = DEFAULT_EDITOR
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, ge=0)
    max_payload_size: int = Field(default=MAX_PAYLOAD_SIZE, ge=0)

    # Editor config storage
    store: Literal["memory", "file", "local"] = "memory"
    config_path: Path = DEFAULT_CONFIG_PATH
    local_db_path: Path = DEFAULT_LOCAL_DB_PATH
    local_key: str = DEFAULT_LOCAL_KEY

    model_config = SettingsConfigDict(
        env_prefix="KITE_",
        env_file=DATA_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def base_url(self) -> str:
        """URL of the daemon's HTTP server."""
        return f"http://{self.host}:{self.port}"
