"""Unit tests for HealthProber.

Covers the ordered classification rules: local invariants first, then the
authenticated liveness request.
"""

from unittest.mock import patch

import httpx
import pytest

from homelab_bridge.health import (
    MSG_CLIENT_NOT_INITIALIZED,
    MSG_MISSING_API_KEY,
    MSG_SETTINGS_NOT_INITIALIZED,
    HealthProber,
    HealthStatus,
    HealthVerdict,
)
from homelab_bridge.settings import SecretBundle, Settings

from tests.mocks import API_KEY, BASE_URL, MockTarget

pytestmark = [pytest.mark.bridge_unit]


def make_settings(api_key: str | None = API_KEY, path: str = BASE_URL) -> Settings:
    secrets = SecretBundle(api_key=api_key) if api_key is not None else None
    return Settings(path=path, secrets=secrets)


class TestHealthProberLocalChecks:
    """Checks that never touch the network."""

    @pytest.mark.asyncio
    async def test_missing_settings(self, target: MockTarget):
        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(None, client).check()

        assert verdict == HealthVerdict(HealthStatus.ERROR, MSG_SETTINGS_NOT_INITIALIZED)
        assert target.state.requests == []

    @pytest.mark.asyncio
    async def test_missing_client(self):
        verdict = await HealthProber(make_settings(), None).check()

        assert verdict.status is HealthStatus.ERROR
        assert verdict.message == MSG_CLIENT_NOT_INITIALIZED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_key", [None, ""])
    async def test_missing_api_key_makes_no_request(self, target: MockTarget, api_key):
        """Fail fast: zero outbound calls when the API key is absent."""
        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(make_settings(api_key=api_key), client).check()

        assert verdict.status is HealthStatus.ERROR
        assert verdict.message == MSG_MISSING_API_KEY
        assert target.state.requests == []

    @pytest.mark.asyncio
    async def test_settings_checked_before_client(self):
        verdict = await HealthProber(None, None).check()

        assert verdict.message == MSG_SETTINGS_NOT_INITIALIZED


class TestHealthProberRequest:
    """Classification of the liveness response."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    async def test_2xx_is_healthy(self, target: MockTarget, status):
        target.state.health_status = status

        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(make_settings(), client).check()

        assert verdict == HealthVerdict.ok()
        assert verdict.message == "healthy"
        assert verdict.is_ok

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [301, 400, 401, 403, 404, 500, 503])
    async def test_non_2xx_is_error_with_status_line(self, target: MockTarget, status):
        target.state.health_status = status

        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(make_settings(), client).check()

        assert verdict.status is HealthStatus.ERROR
        assert str(status) in verdict.message
        assert verdict.message

    @pytest.mark.asyncio
    async def test_sends_bearer_token_to_liveness_path(self, target: MockTarget):
        async with httpx.AsyncClient(transport=target.transport) as client:
            await HealthProber(make_settings(), client).check()

        (request,) = target.state.requests
        assert request.method == "GET"
        assert str(request.url) == f"{BASE_URL}/api/health"
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"

    @pytest.mark.asyncio
    async def test_connection_error_is_reported(self, target: MockTarget):
        target.state.fail_with = httpx.ConnectError("Connection refused")

        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(make_settings(), client).check()

        assert verdict.status is HealthStatus.ERROR
        assert "Connection refused" in verdict.message

    @pytest.mark.asyncio
    async def test_timeout_is_reported(self, target: MockTarget):
        target.state.fail_with = httpx.ReadTimeout("timed out")

        async with httpx.AsyncClient(transport=target.transport) as client:
            verdict = await HealthProber(make_settings(), client).check()

        assert verdict.status is HealthStatus.ERROR
        assert "timeout" in verdict.message.lower()
        assert "timed out" in verdict.message

    @pytest.mark.asyncio
    async def test_request_construction_failure(self, target: MockTarget):
        async with httpx.AsyncClient(transport=target.transport) as client:
            with patch.object(client, "build_request", side_effect=httpx.InvalidURL("bad url")):
                verdict = await HealthProber(make_settings(), client).check()

        assert verdict.status is HealthStatus.ERROR
        assert "failed to create health check request" in verdict.message
        assert "bad url" in verdict.message
        assert target.state.requests == []


class TestHealthVerdict:
    def test_to_dict(self):
        assert HealthVerdict.error("boom").to_dict() == {"status": "error", "message": "boom"}
        assert HealthVerdict.ok().to_dict() == {"status": "ok", "message": "healthy"}
