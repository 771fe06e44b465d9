"""Bridge - the datasource instance the host constructs and calls.

Entry points:
- Bridge.create(...)   build settings + transport, or raise ConfigurationError
- bridge.check_health() liveness verdict
- bridge.query_data()   execute a query batch
"""

import time
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
import structlog

from .health import HealthProber, HealthVerdict
from .query import DataQuery, QueryDataResponse, QueryExecutor
from .scrape import MetricsScraper
from .settings import Settings, load_settings
from .telemetry import BridgeTelemetry
from .transport import TransportOptions, build_client

logger = structlog.get_logger(__name__)


class Bridge:
    """Metrics bridge and health monitor for one configured instance.

    Settings and the HTTP client are fixed at construction and shared by
    concurrent health checks and queries without locking.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        telemetry: BridgeTelemetry | None = None,
    ):
        self.settings = settings
        self.client = client
        self.telemetry = telemetry or BridgeTelemetry()

        self._prober = HealthProber(settings, client)
        self._executor = QueryExecutor(MetricsScraper(settings, client))

    @classmethod
    def create(
        cls,
        json_data: bytes | str | Mapping[str, Any] | None,
        secure_json_data: Mapping[str, str] | None,
        http_options: TransportOptions | None = None,
        *,
        telemetry: BridgeTelemetry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Bridge":
        """Build a ready bridge from host-supplied configuration.

        Args:
            json_data: Settings blob
            secure_json_data: Decrypted secret map
            http_options: Connection options for the shared client
            telemetry: Counter owner; a private one is created if omitted
            transport: Optional httpx transport override (used by tests)

        Raises:
            ConfigurationError: On bad settings, missing secrets or bad options
        """
        logger.info("initializing data source")

        settings = load_settings(json_data, secure_json_data)
        client = build_client(http_options, transport=transport)

        logger.info("data source initialized", path=settings.path)
        return cls(settings, client, telemetry=telemetry)

    async def check_health(self) -> HealthVerdict:
        """Probe the liveness endpoint."""
        start = time.perf_counter()
        try:
            verdict = await self._prober.check()
        finally:
            self.telemetry.record_health_check(time.perf_counter() - start)

        logger.info("check health", status=verdict.status.value, message=verdict.message)
        return verdict

    async def query_data(self, queries: Sequence[DataQuery]) -> QueryDataResponse:
        """Execute a query batch.

        Raises:
            ValidationError: If no query names a metric or a payload is unparsable
        """
        self.telemetry.record_query(count=len(queries))
        return await self._executor.execute(queries)

    async def dispose(self) -> None:
        """Release the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "Bridge":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.dispose()
