"""Non-persistent in-memory store."""

from __future__ import annotations


class MemoryStore:
    """Keeps the blob on the instance. Used by default and in tests."""

    def __init__(self, content: str | None = None):
        self.content = content

    async def set(self, content: str) -> None:
        self.content = content

    async def get(self) -> str | None:
        return self.content
