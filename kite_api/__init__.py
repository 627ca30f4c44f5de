"""Kite API.

Async client facade that lets editor plugins talk to the local Kite daemon:
authentication, path whitelisting, code-intelligence queries and telemetry,
plus a small persistent editor config store.
"""

from kite_api.api import KiteAPI
from kite_api.editor_config import EditorConfig

__version__ = "0.1.0"

__all__ = ["KiteAPI", "EditorConfig", "__version__"]
