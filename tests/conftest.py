"""Pytest configuration and fixtures for Kite API tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from kite_api.api import KiteAPI
from kite_api.config import Settings
from kite_api.connector import HttpConnector
from kite_api.editor_config import EditorConfig
from kite_api.stores import MemoryStore

Predicate = Callable[[httpx.Request], bool]
Handler = Callable[[httpx.Request], httpx.Response]


class FakeDaemon:
    """Routing table standing in for the daemon's HTTP server.

    The first route whose predicate matches handles the request; unmatched
    requests get a 404. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: list[tuple[Predicate, Handler]] = []
        self.requests: list[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
        prefix: bool = False,
    ) -> None:
        """Answer ``method path`` (path includes the query string) with a fixed response."""

        def predicate(request: httpx.Request) -> bool:
            target = raw_target(request)
            matches = target.startswith(path) if prefix else target == path
            return request.method == method and matches

        def handler(request: httpx.Request) -> httpx.Response:
            if json_body is not None:
                return httpx.Response(status, json=json_body)
            return httpx.Response(status, text=text or "")

        self.routes.append((predicate, handler))

    def add(self, predicate: Predicate, handler: Handler) -> None:
        self.routes.append((predicate, handler))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for predicate, handler in self.routes:
            if predicate(request):
                return handler(request)
        return httpx.Response(404)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if raw_target(r).split("?")[0] == path]


def raw_target(request: httpx.Request) -> str:
    """Path and query exactly as sent on the wire."""
    return request.url.raw_path.decode("ascii")


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def daemon() -> FakeDaemon:
    """Fake daemon with no routes (everything 404s)."""
    return FakeDaemon()


@pytest.fixture
def reachable_daemon(daemon: FakeDaemon) -> FakeDaemon:
    """Fake daemon answering pings."""
    daemon.route("GET", "/clientapi/ping")
    return daemon


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, host="127.0.0.1", port=46624, editor="atom")


@pytest.fixture
def connector(daemon: FakeDaemon, settings: Settings) -> HttpConnector:
    """HttpConnector wired to the fake daemon."""
    return HttpConnector.from_settings(settings, transport=httpx.MockTransport(daemon.handle))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def editor_config(store: MemoryStore) -> EditorConfig:
    return EditorConfig(store)


@pytest.fixture
def api(connector: HttpConnector, editor_config: EditorConfig, settings: Settings) -> KiteAPI:
    """KiteAPI talking to the fake daemon with an in-memory editor config."""
    return KiteAPI(connector=connector, editor_config=editor_config, settings=settings)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Path for a file-backed editor config."""
    return tmp_path / "kite" / "editor-config.json"
