"""Integration tests against a real local HTTP server.

Runs the bridge over real sockets against an aiohttp server that plays
the monitored system.
"""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web

from homelab_bridge.datasource import Bridge
from homelab_bridge.health import HealthStatus
from homelab_bridge.query import DataQuery
from homelab_bridge.transport import TransportOptions

pytestmark = [pytest.mark.bridge_integration]

API_KEY = "integration-key"

METRICS = """\
# TYPE go_threads gauge
go_threads 7
http_requests_total{code="200"} 3
http_requests_total 11
"""


class MockHomelabServer:
    """Mock monitored system for integration tests."""

    def __init__(self):
        self.app = web.Application()
        self.app.router.add_get("/api/health", self.handle_health)
        self.app.router.add_get("/metrics", self.handle_metrics)
        self.runner = None
        self.site = None
        self.port = None
        self.requests = []
        self.health_status = 200
        self.health_delay = 0.0

    async def start(self, port: int = 0) -> str:
        """Start the mock server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, "127.0.0.1", port)
        await self.site.start()
        self.port = self.site._server.sockets[0].getsockname()[1]
        return f"http://127.0.0.1:{self.port}"

    async def stop(self):
        """Stop the mock server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None

    async def handle_health(self, request: web.Request) -> web.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != f"Bearer {API_KEY}":
            return web.json_response({"error": "Unauthorized"}, status=401)
        if self.health_delay:
            await asyncio.sleep(self.health_delay)
        return web.json_response({"status": "ok"}, status=self.health_status)

    async def handle_metrics(self, request: web.Request) -> web.Response:
        self.requests.append(request)
        return web.Response(text=METRICS, content_type="text/plain")


@pytest_asyncio.fixture
async def server():
    server = MockHomelabServer()
    url = await server.start()
    server.url = url
    yield server
    await server.stop()


def make_bridge(url: str, api_key: str = API_KEY, timeout: float = 5.0) -> Bridge:
    return Bridge.create(
        {"path": url},
        {"apiKey": api_key},
        TransportOptions(timeout=timeout, trust_env=False),
    )


class TestHealthOverHttp:
    """Liveness probe over a real socket."""

    @pytest.mark.asyncio
    async def test_healthy(self, server):
        async with make_bridge(server.url) as bridge:
            verdict = await bridge.check_health()

        assert verdict.status is HealthStatus.OK

    @pytest.mark.asyncio
    async def test_wrong_key_reports_401(self, server):
        async with make_bridge(server.url, api_key="wrong") as bridge:
            verdict = await bridge.check_health()

        assert verdict.status is HealthStatus.ERROR
        assert "401 Unauthorized" in verdict.message

    @pytest.mark.asyncio
    async def test_server_down(self, server):
        url = server.url
        await server.stop()

        async with make_bridge(url) as bridge:
            verdict = await bridge.check_health()

        assert verdict.status is HealthStatus.ERROR
        assert verdict.message

    @pytest.mark.asyncio
    async def test_timeout_bounded_by_transport(self, server):
        server.health_delay = 1.0

        async with make_bridge(server.url, timeout=0.2) as bridge:
            verdict = await bridge.check_health()

        assert verdict.status is HealthStatus.ERROR
        assert "timeout" in verdict.message.lower()


class TestQueryOverHttp:
    """Scrape + lookup over a real socket."""

    @pytest.mark.asyncio
    async def test_query_batch(self, server):
        async with make_bridge(server.url) as bridge:
            response = await bridge.query_data(
                [
                    DataQuery("A", b'{"metric": "go_threads"}'),
                    DataQuery("B", b'{"metric": "http_requests_total"}'),
                    DataQuery("C", b'{"metric": "go_thread"}'),
                ]
            )

        result = response.to_dict()
        assert result["A"] == {"frame": {"metric_name": "go_threads", "metric_value": 7.0}}
        assert result["B"] == {"frame": {"metric_name": "http_requests_total", "metric_value": 11.0}}
        assert "go_thread not found" in result["C"]["error"]
        assert [r.path for r in server.requests] == ["/metrics"]
