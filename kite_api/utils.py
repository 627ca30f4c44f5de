"""Small helpers shared by the facade and the URL builders."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from kite_api.errors import MissingArgumentError

# Characters JavaScript's encodeURI leaves untouched (besides alphanumerics and -_.~)
_ENCODE_URI_SAFE = ";,/?:@&=+$!*'()#"


def encode_uri(value: str) -> str:
    """Percent-encode a string the way JavaScript's ``encodeURI`` does."""
    return quote(value, safe=_ENCODE_URI_SAFE)


def merge(*dicts: dict[str, Any] | None) -> dict[str, Any]:
    """Shallow-merge dictionaries into a new one, later keys win."""
    merged: dict[str, Any] = {}
    for d in dicts:
        if d:
            merged.update(d)
    return merged


def is_missing(value: Any) -> bool:
    """None and empty strings count as missing; 0 and False do not."""
    return value is None or value == ""


def check_arguments(**named: Any) -> None:
    """Raise MissingArgumentError naming every missing argument.

    Args:
        **named: Argument values keyed by parameter name

    Raises:
        MissingArgumentError: If any value is None or an empty string
    """
    missing = [name for name, value in named.items() if is_missing(value)]
    if missing:
        raise MissingArgumentError(missing)
