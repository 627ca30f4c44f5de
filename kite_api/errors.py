"""Error types raised by the Kite API client."""

from __future__ import annotations

from enum import Enum
from typing import Any


class DaemonState(str, Enum):
    """States the daemon (or a path) can be observed in."""

    UNSUPPORTED = "unsupported"
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"
    RUNNING = "running"
    UNREACHABLE = "unreachable"
    REACHABLE = "reachable"
    AUTHENTICATED = "authenticated"
    WHITELISTED = "whitelisted"


class KiteAPIError(Exception):
    """Base exception for Kite API errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            **self.context,
        }


class MissingArgumentError(KiteAPIError, ValueError):
    """Raised when a required argument is missing, before any I/O."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"missing argument: {', '.join(names)}", names=names)
        self.names = names


class RequestError(KiteAPIError):
    """Raised when a daemon request fails or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        path: str,
        method: str = "GET",
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message, path=path, method=method, status_code=status_code)
        self.path = path
        self.method = method
        self.status_code = status_code
        self.body = body


class InvalidResponseError(KiteAPIError):
    """Raised when a successful response does not carry valid JSON."""

    pass


class StateError(KiteAPIError):
    """Raised when the daemon or a path is already in the requested state."""

    type = "bad_state"

    def __init__(self, message: str, state: DaemonState) -> None:
        super().__init__(message, type=self.type, state=state.value)
        self.state = state


class UnsupportedOperationError(KiteAPIError):
    """Raised when the configured connector does not provide an operation."""

    pass
