"""Constants shared by the Kite API client."""

from __future__ import annotations

from pathlib import Path

# Source buffers larger than this are never sent to the daemon (1 MiB)
DEFAULT_MAX_FILE_SIZE = 1024 * 2**10

# Maximum length of a POST request body (2 MiB)
MAX_PAYLOAD_SIZE = 2**21

# Daemon location
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 46624
DEFAULT_TIMEOUT = 2.0  # seconds

DEFAULT_EDITOR = "atom"
DEFAULT_LANGUAGE = "python"

# Local data
DATA_DIR = Path.home() / ".kite-api"
DEFAULT_CONFIG_PATH = DATA_DIR / "editor-config.json"
DEFAULT_LOCAL_DB_PATH = DATA_DIR / "local-storage.db"
DEFAULT_LOCAL_KEY = "kite-api.editor-config"

# Editor config key holding the per-install distinct id
DISTINCT_ID_PATH = "distinctID"

# Daemon endpoints
PING_PATH = "/clientapi/ping"
USER_PATH = "/clientapi/user"
LOGIN_PATH = "/api/account/login"
AUTHENTICATE_PATH = "/api/account/authenticate"
ACCOUNT_USER_PATH = "/api/account/user"
IS_KITE_LOCAL_PATH = "/clientapi/iskitelocal"
SETTINGS_PATH = "/clientapi/settings"
STATUS_PATH = "/clientapi/status"
AUTHORIZED_PATH = "/clientapi/permissions/authorized"
PROJECT_DIR_PATH = "/clientapi/projectdir"
WHITELIST_PATH = "/clientapi/permissions/whitelist"
BLACKLIST_PATH = "/clientapi/permissions/blacklist"
COMPLETIONS_PATH = "/clientapi/editor/completions"
SIGNATURES_PATH = "/clientapi/editor/signatures"
AUTOCORRECT_PATH = "/clientapi/editor/autocorrect"
AUTOCORRECT_MODEL_INFO_PATH = "/api/editor/autocorrect/model-info"
AUTOCORRECT_ON_SAVE_PATH = "/clientapi/editor/autocorrect/validation/on-save"
AUTOCORRECT_FEEDBACK_PATH = "/clientapi/editor/autocorrect/feedback"
AUTOCORRECT_METRICS_PATH = "/clientapi/editor/autocorrect/metrics"
METRICS_COUNTERS_PATH = "/clientapi/metrics/counters"
