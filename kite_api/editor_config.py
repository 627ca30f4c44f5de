"""Dotted-path access to a JSON tree persisted through a store."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from kite_api.stores import Store

logger = logging.getLogger(__name__)


def _split(path: str | None) -> list[str]:
    return path.split(".") if path else []


def _child(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node.get(key)
    if isinstance(node, list) and key.isdecimal():
        index = int(key)
        return node[index] if index < len(node) else None
    return None


def read_value_at_path(path: str | None, tree: Any) -> Any:
    """Walk ``tree`` along a dotted path.

    An empty path returns the whole tree. A missing key or a None/scalar
    node on the way yields None.
    """
    node = tree
    for key in _split(path):
        if node is None:
            return None
        node = _child(node, key)
    return node


def write_value_at_path(path: str | None, value: Any, tree: Any) -> Any:
    """Assign ``value`` at a dotted path and return the (possibly new) root.

    Missing intermediate nodes are created as empty objects. An empty path
    replaces the whole tree. A missing or falsy scalar root (None, false, 0, "")
    is replaced by a fresh object.

    Raises:
        TypeError: If an intermediate node is a scalar
    """
    keys = _split(path)
    if not keys:
        return value
    if tree is None or (not tree and not isinstance(tree, (dict, list))):
        tree = {}

    node = tree
    for key in keys[:-1]:
        child = _child(node, key)
        if child is None:
            child = {}
            _assign(node, key, child)
        node = child
    _assign(node, keys[-1], value)
    return tree


def _assign(node: Any, key: str, value: Any) -> None:
    if isinstance(node, dict):
        node[key] = value
    elif isinstance(node, list) and key.isdecimal() and int(key) < len(node):
        node[int(key)] = value
    else:
        raise TypeError(f"cannot set key {key!r} on {type(node).__name__} value")


class EditorConfig:
    """JSON tree with dotted-path get/set, lazily loaded from a store.

    The first read loads the store once; afterwards the in-memory tree is the
    source of truth. Writes update the tree before the store write is awaited,
    so later reads see them immediately.
    """

    def __init__(self, store: Store):
        self.store = store
        self.content: Any = None
        self._loaded = False
        self._loading: asyncio.Future[Any] | None = None

    async def get(self, path: str | None = None) -> Any:
        """Value at ``path``, the whole tree for an empty path, else None.

        Raises:
            json.JSONDecodeError: If the stored blob is not valid JSON
        """
        tree = await self._load()
        return read_value_at_path(path, tree)

    async def set(self, path: str | None, value: Any) -> None:
        """Assign ``value`` at ``path`` and persist the whole tree."""
        tree = await self._load()
        self.content = write_value_at_path(path, value, tree)
        blob = json.dumps(self.content, separators=(",", ":"), ensure_ascii=False)
        await self.store.set(blob)

    async def _load(self) -> Any:
        if self._loaded:
            return self.content

        # Concurrent first calls share one backend read
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._read())
        loading = self._loading
        try:
            tree = await loading
        except BaseException:
            if self._loading is loading:
                self._loading = None
            raise

        if not self._loaded:
            self.content = tree
            self._loaded = True
        self._loading = None
        return self.content

    async def _read(self) -> Any:
        data = await self.store.get()
        if not data:
            logger.debug("Editor config store is empty")
            return None
        return json.loads(data)
