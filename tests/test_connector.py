"""Tests for the HTTP daemon connector."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from kite_api.connector import HttpConnector
from kite_api.errors import DaemonState, RequestError, StateError

from conftest import raw_target, request_json


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


class TestRequest:
    """Test HttpConnector.request()."""

    @pytest.mark.asyncio
    async def test_success(self, daemon, connector):
        """2xx responses are returned."""
        daemon.route("GET", "/clientapi/status?filename=", json_body={"status": "indexing"})

        response = await connector.request("/clientapi/status?filename=")

        assert response.json() == {"status": "indexing"}
        assert str(daemon.requests[0].url).startswith("http://127.0.0.1:46624/")

    @pytest.mark.asyncio
    async def test_path_sent_verbatim(self, daemon, connector):
        """Encoded buffer paths reach the daemon unchanged."""
        path = "/api/buffer/atom/:windows:C:my%20dir:a.py/abc/hover?cursor_runes=3"
        daemon.route("GET", path, json_body={})

        await connector.request(path)

        assert raw_target(daemon.requests[0]) == path

    @pytest.mark.asyncio
    async def test_json_body(self, daemon, connector):
        """Non-string data is sent as JSON."""
        daemon.route("POST", "/clientapi/metrics/counters")

        await connector.request("/clientapi/metrics/counters", "POST", {"name": "x", "value": 1})

        assert request_json(daemon.requests[0]) == {"name": "x", "value": 1}

    @pytest.mark.asyncio
    async def test_string_body_sent_as_is(self, daemon, connector):
        daemon.route("PUT", "/clientapi/permissions/whitelist")

        await connector.request("/clientapi/permissions/whitelist", "PUT", '["/home/me"]')

        assert daemon.requests[0].content == b'["/home/me"]'

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, daemon, connector):
        """Error statuses raise RequestError with the status code."""
        daemon.route("GET", "/clientapi/user", status=401, text="unauthorized")

        with pytest.raises(RequestError) as exc_info:
            await connector.request("/clientapi/user")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "unauthorized"
        assert exc_info.value.path == "/clientapi/user"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, settings):
        """Connection failures raise RequestError without a status code."""
        connector = HttpConnector.from_settings(settings, transport=httpx.MockTransport(unreachable))

        with pytest.raises(RequestError) as exc_info:
            await connector.request("/clientapi/user")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_failure_listeners(self, daemon, connector):
        """Listeners are notified of failures until disposed."""
        failures = []
        dispose = connector.on_did_fail_request(failures.append)

        with pytest.raises(RequestError):
            await connector.request("/missing")
        dispose()
        with pytest.raises(RequestError):
            await connector.request("/missing")

        assert len(failures) == 1
        assert failures[0].status_code == 404


class TestHealth:
    """Test reachability, authentication and health checks."""

    @pytest.mark.asyncio
    async def test_reachable_on_any_answer(self, daemon, connector):
        """A 404 still proves the daemon is listening."""
        assert await connector.is_kite_reachable() is True

    @pytest.mark.asyncio
    async def test_unreachable(self, settings):
        connector = HttpConnector.from_settings(settings, transport=httpx.MockTransport(unreachable))
        assert await connector.is_kite_reachable() is False
        assert await connector.is_user_authenticated() is False
        assert await connector.check_health() == DaemonState.UNREACHABLE

    @pytest.mark.asyncio
    async def test_authenticated(self, reachable_daemon, connector):
        reachable_daemon.route("GET", "/clientapi/user", json_body={"id": 1})
        assert await connector.is_user_authenticated() is True
        assert await connector.check_health() == DaemonState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_reachable_not_logged_in(self, reachable_daemon, connector):
        reachable_daemon.route("GET", "/clientapi/user", status=401)
        assert await connector.is_user_authenticated() is False
        assert await connector.check_health() == DaemonState.REACHABLE


class TestWaitForKite:
    """Test polling for daemon reachability."""

    @pytest.mark.asyncio
    async def test_returns_once_reachable(self, connector):
        with patch.object(connector, "is_kite_reachable", AsyncMock(side_effect=[False, False, True])), \
                patch("kite_api.connector.asyncio.sleep", AsyncMock()) as mock_sleep:
            await connector.wait_for_kite(attempts=5, interval=0.1)

        assert mock_sleep.await_count == 2
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_raises_when_exhausted(self, connector):
        with patch.object(connector, "is_kite_reachable", AsyncMock(return_value=False)), \
                patch("kite_api.connector.asyncio.sleep", AsyncMock()):
            with pytest.raises(StateError) as exc_info:
                await connector.wait_for_kite(attempts=3)

        assert exc_info.value.state == DaemonState.UNREACHABLE


class TestFromSettings:
    """Test construction from settings."""

    def test_base_url_and_debug(self, settings):
        settings = settings.model_copy(update={"port": 9999, "request_debug": True})
        connector = HttpConnector.from_settings(settings)

        assert connector.base_url == "http://127.0.0.1:9999"
        assert connector.debug is True
