"""Connector to the local Kite daemon.

The facade treats the connector as an opaque collaborator: process
supervision, platform detection and install/download orchestration belong to
platform connectors. HttpConnector provides the part that is observable over
HTTP (requests, reachability, authentication, health).
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Protocol

import httpx

from kite_api.config import Settings
from kite_api.constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, PING_PATH, USER_PATH
from kite_api.errors import DaemonState, RequestError, StateError
from kite_api.utils import merge

logger = logging.getLogger(__name__)

# Suppress httpx INFO logs by default (one line per request)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

__all__ = ["Connector", "HttpConnector", "CONNECTOR_METHODS"]

# Operations the facade forwards unchanged to its connector
CONNECTOR_METHODS = (
    "check_health",
    "request",
    "on_did_fail_request",
    "is_kite_supported",
    "is_kite_installed",
    "can_install_kite",
    "download_kite_release",
    "download_kite",
    "install_kite",
    "is_kite_running",
    "can_run_kite",
    "run_kite",
    "run_kite_and_wait",
    "is_kite_enterprise_installed",
    "is_kite_enterprise_running",
    "can_run_kite_enterprise",
    "run_kite_enterprise",
    "run_kite_enterprise_and_wait",
    "is_kite_reachable",
    "wait_for_kite",
    "is_user_authenticated",
)

FailureListener = Callable[[RequestError], None]

DEFAULT_HEADERS = {"Content-Type": "application/json"}

MAX_WAIT_INTERVAL = 5.0  # seconds


class Connector(Protocol):
    """Request/response interface the facade needs from a connector.

    Platform connectors also provide the process-management operations named
    in CONNECTOR_METHODS.
    """

    async def request(
        self,
        path: str,
        method: str = "GET",
        data: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response: ...

    async def is_kite_reachable(self) -> bool: ...

    async def is_user_authenticated(self) -> bool: ...


class HttpConnector:
    """HTTP connector talking to the daemon with an httpx AsyncClient.

    Example:
        >>> async with HttpConnector() as connector:
        ...     if await connector.is_kite_reachable():
        ...         response = await connector.request("/clientapi/status?filename=")
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ):
        """Initialize the connector.

        Args:
            host: Daemon host
            port: Daemon port
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            headers: Extra headers sent with every request
        """
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self.debug = False
        self._failure_listeners: list[FailureListener] = []
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout, connect=timeout),
            headers=merge(DEFAULT_HEADERS, headers),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpConnector:
        connector = cls(
            host=settings.host,
            port=settings.port,
            timeout=settings.timeout,
            transport=transport,
        )
        connector.debug = settings.request_debug
        return connector

    async def request(
        self,
        path: str,
        method: str = "GET",
        data: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one request to the daemon.

        Args:
            path: Endpoint path, including any query string
            method: HTTP method
            data: Body; str/bytes are sent as-is, anything else as JSON
            timeout: Per-request timeout overriding the default

        Returns:
            The 2xx response

        Raises:
            RequestError: On transport errors and non-2xx responses
        """
        if data is None or isinstance(data, (str, bytes)):
            content = data
        else:
            content = json.dumps(data)

        if self.debug:
            logger.debug(f"{method} {path} {content if content is not None else ''}")

        try:
            response = await self._client.request(
                method,
                path,
                content=content,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            error = RequestError(f"{method} {path} failed: {e}", path=path, method=method)
            self._notify_failure(error)
            raise error from e

        if self.debug:
            logger.debug(f"{method} {path} -> {response.status_code}")

        if not response.is_success:
            error = RequestError(
                f"{method} {path} returned {response.status_code}",
                path=path,
                method=method,
                status_code=response.status_code,
                body=response.text,
            )
            self._notify_failure(error)
            raise error

        return response

    def on_did_fail_request(self, listener: FailureListener) -> Callable[[], None]:
        """Register a listener called with every RequestError.

        Returns:
            A function that unregisters the listener
        """
        self._failure_listeners.append(listener)

        def dispose() -> None:
            if listener in self._failure_listeners:
                self._failure_listeners.remove(listener)

        return dispose

    def _notify_failure(self, error: RequestError) -> None:
        for listener in list(self._failure_listeners):
            listener(error)

    async def is_kite_reachable(self) -> bool:
        """Check whether the daemon answers HTTP requests at all."""
        try:
            await self._client.get(PING_PATH)
            return True
        except httpx.HTTPError:
            return False

    async def is_user_authenticated(self) -> bool:
        """Check whether a user is logged into the daemon."""
        try:
            response = await self._client.get(USER_PATH)
        except httpx.HTTPError:
            return False
        return response.is_success

    async def check_health(self) -> DaemonState:
        """Highest state observable over HTTP."""
        if not await self.is_kite_reachable():
            return DaemonState.UNREACHABLE
        if await self.is_user_authenticated():
            return DaemonState.AUTHENTICATED
        return DaemonState.REACHABLE

    async def wait_for_kite(self, attempts: int = 10, interval: float = 0.5) -> None:
        """Poll until the daemon is reachable.

        Args:
            attempts: Number of reachability checks
            interval: Initial delay between checks, doubled after each miss
                up to MAX_WAIT_INTERVAL

        Raises:
            StateError: If the daemon is still unreachable after all attempts
        """
        delay = interval
        for attempt in range(attempts):
            if await self.is_kite_reachable():
                return
            if attempt < attempts - 1:
                logger.debug(f"Daemon not reachable, retrying in {delay:.2f}s")
                await asyncio.sleep(delay)
                delay = min(delay * 2, MAX_WAIT_INTERVAL)
        raise StateError(
            f"Kite daemon unreachable after {attempts} attempts",
            state=DaemonState.UNREACHABLE,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpConnector:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
