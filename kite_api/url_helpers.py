"""Builders for daemon endpoint paths."""

from __future__ import annotations

import hashlib
import re

from kite_api.constants import (
    AUTHORIZED_PATH,
    DEFAULT_EDITOR,
    PROJECT_DIR_PATH,
    SETTINGS_PATH,
    STATUS_PATH,
)
from kite_api.utils import encode_uri, merge

_DRIVE_LETTER_RE = re.compile(r"^([A-Z]):")
_SEPARATOR_RE = re.compile(r"/|\\|%5C")


def clean_path(path: str) -> str:
    """Encode a file path as a single URL segment.

    The daemon caches buffers by this key, so the encoding must stay stable:
    percent-encode, turn a leading drive letter into ``/windows/<letter>``,
    then replace every separator with ``:``.
    """
    encoded = encode_uri(path)
    encoded = _DRIVE_LETTER_RE.sub(r"/windows/\1", encoded)
    return _SEPARATOR_RE.sub(":", encoded)


def source_hash(source: str) -> str:
    """MD5 digest of the UTF-8 encoded buffer content."""
    return hashlib.md5(source.encode("utf-8")).hexdigest()


def query_string(params: dict[str, object]) -> str:
    return "&".join(f"{key}={value}" for key, value in params.items())


def hover_path(
    filename: str,
    source: str,
    position: int,
    editor: str = DEFAULT_EDITOR,
    encoding: str | None = None,
) -> str:
    """Path of the hover endpoint for a buffer state and cursor position."""
    buffer = clean_path(filename)
    state = source_hash(source)
    params = merge(
        {"cursor_runes": position},
        {"offset_encoding": encoding} if encoding else None,
    )
    return f"/api/buffer/{editor}/{buffer}/{state}/hover?{query_string(params)}"


def escape_id(value: object) -> str:
    return encode_uri(str(value)).replace(";", "%3B")


def _filename_query(base: str, filename: str) -> str:
    return f"{base}?filename={encode_uri(filename)}"


def status_path(filename: str | None = None) -> str:
    return _filename_query(STATUS_PATH, filename or "")


def authorized_path(filename: str) -> str:
    return _filename_query(AUTHORIZED_PATH, filename)


def project_dir_path(filename: str) -> str:
    return _filename_query(PROJECT_DIR_PATH, filename)


def setting_path(key: str) -> str:
    return f"{SETTINGS_PATH}/{escape_id(key)}"


def symbol_report_path(symbol_id: object) -> str:
    return f"/api/editor/symbol/{escape_id(symbol_id)}"


def value_report_path(value_id: object) -> str:
    return f"/api/editor/value/{escape_id(value_id)}"


def members_path(value_id: object, page: int = 0, limit: int = 999) -> str:
    params = {"offset": page, "limit": limit}
    return f"{value_report_path(value_id)}/members?{query_string(params)}"


def usages_path(value_id: object, page: int = 0, limit: int = 999) -> str:
    params = {"offset": page, "limit": limit}
    return f"{value_report_path(value_id)}/usages?{query_string(params)}"


def usage_path(usage_id: object) -> str:
    return f"/api/editor/usages/{escape_id(usage_id)}"


def example_path(example_id: object) -> str:
    return f"/api/python/curation/{escape_id(example_id)}"
