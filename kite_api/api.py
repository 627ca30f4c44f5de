"""Client facade editor plugins use to talk to the Kite daemon."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from kite_api import url_helpers as urls
from kite_api.config import Settings
from kite_api.connector import CONNECTOR_METHODS, Connector, HttpConnector
from kite_api.constants import (
    ACCOUNT_USER_PATH,
    AUTHENTICATE_PATH,
    AUTOCORRECT_FEEDBACK_PATH,
    AUTOCORRECT_METRICS_PATH,
    AUTOCORRECT_MODEL_INFO_PATH,
    AUTOCORRECT_ON_SAVE_PATH,
    AUTOCORRECT_PATH,
    BLACKLIST_PATH,
    COMPLETIONS_PATH,
    DISTINCT_ID_PATH,
    IS_KITE_LOCAL_PATH,
    LOGIN_PATH,
    METRICS_COUNTERS_PATH,
    SIGNATURES_PATH,
    USER_PATH,
    WHITELIST_PATH,
)
from kite_api.editor_config import EditorConfig
from kite_api.errors import (
    DaemonState,
    InvalidResponseError,
    KiteAPIError,
    RequestError,
    StateError,
    UnsupportedOperationError,
)
from kite_api.schemas import (
    AutocorrectFeedbackRequest,
    AutocorrectHashMismatchRequest,
    AutocorrectModelInfoRequest,
    AutocorrectRequest,
    BlacklistRequest,
    BufferRequest,
    LoginRequest,
    MetricCounter,
    SessionRequest,
    StatusResponse,
    UserResponse,
)
from kite_api.stores import create_store
from kite_api.utils import check_arguments, is_missing

logger = logging.getLogger(__name__)


class KiteAPI:
    """Facade over a daemon connector and the editor config.

    Connector operations (see CONNECTOR_METHODS) are forwarded unchanged.
    Primary lookups raise on failure; nice-to-have operations (completions,
    signatures, status, autocorrect, metrics) fall back to safe defaults.

    Example:
        >>> async with KiteAPI() as api:
        ...     completions = await api.get_completions_at_position("a.py", "import o", 8)
    """

    def __init__(
        self,
        connector: Connector | None = None,
        editor_config: EditorConfig | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the facade.

        Args:
            connector: Daemon connector (defaults to an HttpConnector built from settings)
            editor_config: Editor config (defaults to one on the configured store)
            settings: Client settings (defaults to environment-derived Settings)
        """
        self.settings = settings or Settings()
        self.connector = connector or HttpConnector.from_settings(self.settings)
        self.editor_config = editor_config or EditorConfig(create_store(self.settings))
        self.editor = self.settings.editor
        self.max_file_size = self.settings.max_file_size
        self.max_payload_size = self.settings.max_payload_size
        self._saved_log_level: int | None = None

    # --- Plumbing ---

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not defined on the facade itself
        if name in CONNECTOR_METHODS:
            return self._connector_operation(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def _connector_operation(self, name: str) -> Any:
        connector = self.__dict__.get("connector")
        operation = getattr(connector, name, None)
        if operation is None:
            raise UnsupportedOperationError(
                f"{type(connector).__name__} does not provide {name}",
                operation=name,
            )
        return operation

    async def request(
        self,
        path: str,
        method: str = "GET",
        data: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Forward to the connector's ``request``."""
        return await self._connector_operation("request")(path, method, data, timeout)

    async def is_kite_reachable(self) -> bool:
        return await self._connector_operation("is_kite_reachable")()

    async def is_user_authenticated(self) -> bool:
        return await self._connector_operation("is_user_authenticated")()

    async def request_json(
        self,
        path: str,
        method: str = "GET",
        data: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a request and decode its JSON body.

        Raises:
            RequestError: On transport errors and non-2xx responses
            InvalidResponseError: If the body is not valid JSON
        """
        response = await self.request(path, method, data, timeout)
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"{method} {path} returned invalid JSON",
                path=path,
            ) from e

    async def _post_json(self, path: str, payload: dict[str, Any], method: str = "POST") -> Any:
        body = self._encode_payload(path, payload, method)
        return await self.request_json(path, method, body)

    async def _post(self, path: str, payload: Any, method: str = "POST") -> httpx.Response:
        body = self._encode_payload(path, payload, method)
        return await self.request(path, method, body)

    def _encode_payload(self, path: str, payload: Any, method: str) -> str:
        body = json.dumps(payload)
        if len(body) > self.max_payload_size:
            raise RequestError(
                f"{method} {path} payload of {len(body)} bytes exceeds {self.max_payload_size}",
                path=path,
                method=method,
            )
        return body

    def _is_too_large(self, source: str) -> bool:
        if len(source) > self.max_file_size:
            logger.debug(f"Buffer of {len(source)} chars exceeds {self.max_file_size}, not sent")
            return True
        return False

    def toggle_request_debug(self) -> bool:
        """Turn request logging on the connector on or off.

        Returns:
            The new debug flag
        """
        debug = not getattr(self.connector, "debug", False)
        self.connector.debug = debug
        connector_logger = logging.getLogger("kite_api.connector")
        if debug:
            self._saved_log_level = connector_logger.level
            connector_logger.setLevel(logging.DEBUG)
        elif self._saved_log_level is not None:
            connector_logger.setLevel(self._saved_log_level)
            self._saved_log_level = None
        return debug

    async def aclose(self) -> None:
        aclose = getattr(self.connector, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> KiteAPI:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Account ---

    async def is_kite_local(self) -> bool:
        """Whether the daemon runs with local-only features."""
        try:
            await self.request(IS_KITE_LOCAL_PATH)
            return True
        except RequestError:
            return False

    async def get_kite_setting(self, key: str) -> Any:
        check_arguments(key=key)
        return await self.request_json(urls.setting_path(key))

    async def set_kite_setting(self, key: str, value: Any) -> Any:
        check_arguments(key=key)
        return await self.request_json(urls.setting_path(key), "POST", json.dumps(value))

    async def can_authenticate_user(self) -> None:
        """Ensure a login attempt makes sense.

        Raises:
            StateError: If the daemon is unreachable or a user is already logged in
        """
        if not await self.is_kite_reachable():
            raise StateError("Kite is not reachable", state=DaemonState.UNREACHABLE)
        if await self.is_user_authenticated():
            raise StateError("Kite is already authenticated", state=DaemonState.AUTHENTICATED)

    async def authenticate_user(self, email: str, password: str) -> httpx.Response:
        """Log a user in with email and password, then persist the user id."""
        check_arguments(email=email, password=password)
        await self.can_authenticate_user()
        response = await self._post(
            LOGIN_PATH,
            LoginRequest(email=email, password=password).model_dump(),
        )
        await self.save_user_id()
        return response

    async def authenticate_session_id(self, key: str) -> httpx.Response:
        """Log a user in with a session key, then persist the user id."""
        check_arguments(key=key)
        await self.can_authenticate_user()
        response = await self._post(AUTHENTICATE_PATH, SessionRequest(key=key).model_dump())
        await self.save_user_id()
        return response

    async def save_user_id(self) -> None:
        """Store the logged-in user's id as the distinct id.

        Best effort: failures are logged and never raised.
        """
        try:
            user = UserResponse.model_validate(await self.request_json(USER_PATH))
            if not is_missing(user.id):
                await self.editor_config.set(DISTINCT_ID_PATH, user.id)
        except Exception as e:
            logger.debug(f"Could not persist distinct id: {e}")

    async def get_user_account_info(self) -> Any:
        return await self.request_json(ACCOUNT_USER_PATH)

    # --- Path authorization ---

    async def is_path_whitelisted(self, path: str) -> bool:
        """Whether the daemon is allowed to index ``path``.

        Raises:
            RequestError: On failures other than a 403 refusal
        """
        check_arguments(path=path)
        try:
            await self.request(urls.authorized_path(path))
            return True
        except RequestError as e:
            if e.status_code == 403:
                return False
            raise

    async def project_dir_for_file(self, path: str) -> str:
        """Project directory the daemon would whitelist for ``path``."""
        check_arguments(path=path)
        response = await self.request(urls.project_dir_path(path))
        return response.text

    async def can_whitelist_path(self, path: str) -> str:
        """Ensure ``path`` can be whitelisted and return its project directory.

        Raises:
            StateError: If the path is already whitelisted
        """
        check_arguments(path=path)
        if await self.is_path_whitelisted(path):
            raise StateError("The path is already whitelisted", state=DaemonState.WHITELISTED)
        return await self.project_dir_for_file(path)

    async def whitelist_path(self, path: str) -> httpx.Response:
        check_arguments(path=path)
        project_dir = await self.can_whitelist_path(path)
        return await self._post(WHITELIST_PATH, [project_dir], method="PUT")

    async def blacklist_path(self, path: str, no_action: bool = False) -> httpx.Response:
        """Record that the user declined to whitelist ``path``.

        Args:
            path: File the prompt was shown for
            no_action: True when the prompt was dismissed rather than refused
        """
        check_arguments(path=path)
        await self.can_whitelist_path(path)
        payload = BlacklistRequest(paths=[path], closed=no_action)
        return await self._post(BLACKLIST_PATH, payload.model_dump(), method="PUT")

    async def should_offer_whitelist(self, path: str) -> str | None:
        """Project directory to offer for whitelisting, or None."""
        try:
            return await self.can_whitelist_path(path)
        except (StateError, RequestError):
            return None

    # --- Code intelligence ---

    async def get_hover_data_at_position(
        self,
        filename: str,
        source: str,
        position: int,
        editor: str | None = None,
        encoding: str | None = None,
    ) -> Any:
        check_arguments(filename=filename, source=source, position=position)
        path = urls.hover_path(filename, source, position, editor or self.editor, encoding)
        return await self.request_json(path)

    async def get_report_data_at_position(
        self,
        filename: str,
        source: str,
        position: int,
        editor: str | None = None,
        encoding: str | None = None,
    ) -> list[Any]:
        """Hover data, followed by the symbol report when one is available."""
        hover = await self.get_hover_data_at_position(filename, source, position, editor, encoding)
        return await self.get_report_data_from_hover(hover)

    async def get_report_data_from_hover(self, hover: Any) -> list[Any]:
        symbols = hover.get("symbol") if isinstance(hover, dict) else None
        symbol_id = symbols[0].get("id") if symbols else None
        if is_missing(symbol_id):
            return [hover]
        try:
            report = await self.get_symbol_report_data_for_id(symbol_id)
        except KiteAPIError as e:
            logger.debug(f"Symbol report for {symbol_id} unavailable: {e}")
            return [hover]
        return [hover, report]

    async def get_symbol_report_data_for_id(self, symbol_id: str) -> Any:
        check_arguments(symbol_id=symbol_id)
        return await self.request_json(urls.symbol_report_path(symbol_id))

    async def get_value_report_data_for_id(self, value_id: str) -> Any:
        check_arguments(value_id=value_id)
        return await self.request_json(urls.value_report_path(value_id))

    async def get_members_data_for_id(self, value_id: str, page: int = 0, limit: int = 999) -> Any:
        check_arguments(value_id=value_id)
        return await self.request_json(urls.members_path(value_id, page, limit))

    async def get_usages_data_for_value_id(
        self,
        value_id: str,
        page: int = 0,
        limit: int = 999,
    ) -> Any:
        check_arguments(value_id=value_id)
        return await self.request_json(urls.usages_path(value_id, page, limit))

    async def get_usage_data_for_id(self, usage_id: str) -> Any:
        check_arguments(usage_id=usage_id)
        return await self.request_json(urls.usage_path(usage_id))

    async def get_example_data_for_id(self, example_id: str) -> Any:
        check_arguments(example_id=example_id)
        return await self.request_json(urls.example_path(example_id))

    async def get_status(self, filename: str | None = None) -> dict[str, Any]:
        """Indexing status for ``filename``; ``{"status": "ready"}`` on failure."""
        try:
            data = await self.request_json(urls.status_path(filename))
            return StatusResponse.model_validate(data).model_dump()
        except (KiteAPIError, ValueError) as e:
            logger.debug(f"Status unavailable: {e}")
            return StatusResponse().model_dump()

    def _buffer_payload(
        self,
        filename: str,
        source: str,
        position: int,
        editor: str | None,
        encoding: str | None,
    ) -> dict[str, Any]:
        return BufferRequest(
            text=source,
            editor=editor or self.editor,
            filename=filename,
            cursor_runes=position,
            offset_encoding=encoding,
        ).model_dump(exclude_none=True)

    async def get_completions_at_position(
        self,
        filename: str,
        source: str,
        position: int,
        editor: str | None = None,
        encoding: str | None = None,
    ) -> list[Any]:
        """Completions at ``position``; an empty list when unavailable."""
        check_arguments(filename=filename, source=source, position=position)
        if self._is_too_large(source):
            return []
        payload = self._buffer_payload(filename, source, position, editor, encoding)
        try:
            data = await self._post_json(COMPLETIONS_PATH, payload)
        except KiteAPIError as e:
            logger.debug(f"Completions unavailable: {e}")
            return []
        if not isinstance(data, dict):
            return []
        return data.get("completions") or []

    async def get_signatures_at_position(
        self,
        filename: str,
        source: str,
        position: int,
        editor: str | None = None,
        encoding: str | None = None,
    ) -> Any:
        """Call signatures at ``position``; None when unavailable."""
        check_arguments(filename=filename, source=source, position=position)
        if self._is_too_large(source):
            return None
        payload = self._buffer_payload(filename, source, position, editor, encoding)
        return await self._post_or_none(SIGNATURES_PATH, payload, "Signatures")

    async def get_autocorrect_data(
        self,
        filename: str,
        source: str,
        metadata: dict[str, Any] | None = None,
    ) -> Any:
        """Autocorrect fixes for the buffer; None when unavailable."""
        check_arguments(filename=filename, source=source)
        if self._is_too_large(source):
            return None
        payload = AutocorrectRequest(metadata=metadata, buffer=source, filename=filename)
        return await self._post_or_none(AUTOCORRECT_PATH, payload.model_dump(), "Autocorrect")

    async def get_autocorrect_model_info(
        self,
        version: int | str,
        metadata: dict[str, Any] | None = None,
    ) -> Any:
        check_arguments(version=version)
        payload = AutocorrectModelInfoRequest(metadata=metadata, version=version)
        return await self._post_or_none(
            AUTOCORRECT_MODEL_INFO_PATH,
            payload.model_dump(),
            "Autocorrect model info",
        )

    async def _post_or_none(self, path: str, payload: dict[str, Any], what: str) -> Any:
        try:
            return await self._post_json(path, payload)
        except KiteAPIError as e:
            logger.debug(f"{what} unavailable: {e}")
            return None

    # --- Telemetry ---

    async def post_save_validation_data(
        self,
        filename: str,
        source: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        check_arguments(filename=filename, source=source)
        if self._is_too_large(source):
            return
        payload = AutocorrectRequest(metadata=metadata, buffer=source, filename=filename)
        await self._post_and_forget(AUTOCORRECT_ON_SAVE_PATH, payload.model_dump())

    async def post_autocorrect_feedback_data(
        self,
        response: dict[str, Any],
        feedback: int | str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        check_arguments(response=response, feedback=feedback)
        payload = AutocorrectFeedbackRequest(
            metadata=metadata,
            response=response,
            feedback=feedback,
        )
        await self._post_and_forget(AUTOCORRECT_FEEDBACK_PATH, payload.model_dump())

    async def post_autocorrect_hash_mismatch_data(
        self,
        response: dict[str, Any],
        request_start_time: float,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Report a hash mismatch along with the daemon's response time.

        Args:
            response: Autocorrect response whose buffer hash did not match
            request_start_time: time.time() taken when the request was sent
            metadata: Editor metadata attached to the report
        """
        check_arguments(response=response, request_start_time=request_start_time)
        payload = AutocorrectHashMismatchRequest(
            metadata=metadata,
            response=response,
            response_time=_elapsed_ms(request_start_time),
        )
        await self._post_and_forget(AUTOCORRECT_METRICS_PATH, payload.model_dump())

    async def send_feature_metric(self, name: str) -> None:
        check_arguments(name=name)
        await self._post_and_forget(METRICS_COUNTERS_PATH, MetricCounter(name=name).model_dump())

    async def feature_requested(self, name: str, editor: str | None = None) -> None:
        await self.send_feature_metric(f"{editor or self.editor}_{name}_requested")

    async def feature_fulfilled(self, name: str, editor: str | None = None) -> None:
        await self.send_feature_metric(f"{editor or self.editor}_{name}_fulfilled")

    async def _post_and_forget(self, path: str, payload: dict[str, Any]) -> None:
        try:
            await self._post(path, payload)
        except KiteAPIError as e:
            logger.debug(f"POST {path} dropped: {e}")


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 3)

