"""HealthProber - single authenticated liveness probe.

Runs cheap local checks first (settings, client, API key) and only then
issues one GET to the liveness endpoint. Every probe ends in OK or ERROR.
"""

from dataclasses import dataclass
from enum import Enum

import httpx
import structlog

from .errors import map_connection_error, map_http_error
from .settings import Settings

logger = structlog.get_logger(__name__)

MSG_HEALTHY = "healthy"
MSG_SETTINGS_NOT_INITIALIZED = "settings not initialized"
MSG_CLIENT_NOT_INITIALIZED = "client not initialized"
MSG_MISSING_API_KEY = "missing API key"


class HealthStatus(str, Enum):
    """Outcome of a liveness probe."""

    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class HealthVerdict:
    """Probe status plus a short human-readable message."""

    status: HealthStatus
    message: str

    @property
    def is_ok(self) -> bool:
        return self.status is HealthStatus.OK

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status.value, "message": self.message}

    @classmethod
    def ok(cls, message: str = MSG_HEALTHY) -> "HealthVerdict":
        return cls(HealthStatus.OK, message)

    @classmethod
    def error(cls, message: str) -> "HealthVerdict":
        return cls(HealthStatus.ERROR, message)


def auth_headers(api_key: str) -> dict[str, str]:
    """Build the bearer Authorization header."""
    return {"Authorization": f"Bearer {api_key}"}


class HealthProber:
    """Probes the liveness endpoint of the monitored system."""

    def __init__(self, settings: Settings | None, client: httpx.AsyncClient | None):
        """Initialize HealthProber.

        Args:
            settings: Loaded settings (may be None if the bridge is half-built)
            client: Shared HTTP client
        """
        self.settings = settings
        self.client = client

    async def check(self) -> HealthVerdict:
        """Run one liveness probe.

        Returns:
            HealthVerdict; transport and HTTP failures are reported, not raised
        """
        if self.settings is None:
            logger.error("health check failed", reason=MSG_SETTINGS_NOT_INITIALIZED)
            return HealthVerdict.error(MSG_SETTINGS_NOT_INITIALIZED)

        if self.client is None:
            logger.error("health check failed", reason=MSG_CLIENT_NOT_INITIALIZED)
            return HealthVerdict.error(MSG_CLIENT_NOT_INITIALIZED)

        api_key = self.settings.api_key
        if not api_key:
            logger.error("health check failed", reason=MSG_MISSING_API_KEY)
            return HealthVerdict.error(MSG_MISSING_API_KEY)

        url = self.settings.health_url
        try:
            request = self.client.build_request("GET", url, headers=auth_headers(api_key))
        except (httpx.InvalidURL, ValueError) as e:
            logger.error("health check request could not be built", url=url, error=str(e))
            return HealthVerdict.error(f"failed to create health check request: {e}")

        try:
            response = await self.client.send(request)
        except httpx.TimeoutException as e:
            error = map_connection_error(str(e) or type(e).__name__, url, is_timeout=True)
            logger.warning("health check timed out", url=url)
            return HealthVerdict.error(error.message)
        except httpx.RequestError as e:
            error = map_connection_error(str(e) or type(e).__name__, url)
            logger.warning("health check request failed", url=url, error=str(e))
            return HealthVerdict.error(error.message)

        try:
            if not response.is_success:
                error = map_http_error(response.status_code, response.reason_phrase, url)
                logger.warning("health check unhealthy", url=url, status=response.status_code)
                return HealthVerdict.error(error.message)
        finally:
            await response.aclose()

        logger.debug("health check ok", url=url, status=response.status_code)
        return HealthVerdict.ok()
