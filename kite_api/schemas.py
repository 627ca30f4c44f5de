"""Pydantic schemas for daemon request/response payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kite_api.constants import DEFAULT_LANGUAGE


# --- Request Schemas ---


class LoginRequest(BaseModel):
    """Email/password login."""

    email: str
    password: str


class SessionRequest(BaseModel):
    """Login with an existing session key."""

    key: str


class BlacklistRequest(BaseModel):
    """Paths the user declined to whitelist."""

    paths: list[str]
    closed: bool = False


class BufferRequest(BaseModel):
    """Buffer state sent for completions and signatures."""

    text: str
    editor: str
    filename: str
    cursor_runes: int = Field(..., ge=0)
    offset_encoding: str | None = None


class AutocorrectRequest(BaseModel):
    """Buffer sent for autocorrect or on-save validation."""

    metadata: dict[str, Any] | None = None
    buffer: str
    filename: str
    language: str = DEFAULT_LANGUAGE


class AutocorrectModelInfoRequest(BaseModel):
    """Lookup of the autocorrect model changelog."""

    metadata: dict[str, Any] | None = None
    language: str = DEFAULT_LANGUAGE
    version: int | str


class AutocorrectFeedbackRequest(BaseModel):
    """User feedback on an autocorrect response."""

    metadata: dict[str, Any] | None = None
    response: dict[str, Any]
    feedback: int | str


class AutocorrectHashMismatchRequest(BaseModel):
    """Report of a buffer hash mismatch on an autocorrect response."""

    metadata: dict[str, Any] | None = None
    response: dict[str, Any]
    response_time: int | float


class MetricCounter(BaseModel):
    """Increment of a named feature counter."""

    name: str
    value: int = 1


# --- Response Schemas ---


class StatusResponse(BaseModel):
    """Daemon indexing status for a file."""

    model_config = ConfigDict(extra="allow")

    status: str = "ready"


class UserResponse(BaseModel):
    """Currently logged-in user."""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
