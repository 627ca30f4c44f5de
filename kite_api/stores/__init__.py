"""Storage backends for the editor config blob."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from kite_api.stores.file import FileStore
from kite_api.stores.local import LocalStore
from kite_api.stores.memory import MemoryStore

if TYPE_CHECKING:
    from kite_api.config import Settings


class Store(Protocol):
    """Raw get/set of an opaque string blob.

    ``get`` resolves to None when nothing was stored or the read failed;
    ``set`` propagates write failures.
    """

    async def get(self) -> str | None: ...

    async def set(self, content: str) -> None: ...


def create_store(settings: Settings) -> Store:
    """Build the storage backend selected in the settings."""
    if settings.store == "file":
        return FileStore(settings.config_path)
    if settings.store == "local":
        return LocalStore(settings.local_key, db_path=settings.local_db_path)
    return MemoryStore()


__all__ = ["Store", "FileStore", "LocalStore", "MemoryStore", "create_store"]
