"""Metrics scraper - fetch a text exposition and look up one metric.

Only plain ``<metric_name> <value>`` lines are matched. Lines with label
sets or timestamps are skipped; multi-series metrics are not supported.
"""

from dataclasses import dataclass

import httpx
import structlog

from .errors import (
    MalformedValueError,
    MetricNotFoundError,
    TransportError,
    map_connection_error,
    map_http_error,
)
from .health import auth_headers
from .settings import Settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MetricSample:
    """One metric value located in a scraped document."""

    name: str
    value: float


def _parse_value(name: str, token: str) -> float:
    # float() also takes digit separators and non-ASCII digits
    if "_" in token or not token.isascii():
        raise _malformed(name, token)
    try:
        return float(token)
    except ValueError:
        raise _malformed(name, token) from None


def _malformed(name: str, token: str) -> MalformedValueError:
    return MalformedValueError(
        message=f"metric {name} has malformed value {token!r}",
        data={"metric": name, "value": token},
    )


def find_metric(document: str, name: str) -> MetricSample:
    """Find the first ``name value`` line in a metrics document.

    The first whitespace-separated token must equal ``name`` exactly and the
    line must hold exactly one more token. ``foo`` never matches ``foo_bar``
    or ``foo{job="x"}``.

    Args:
        document: Scraped text document
        name: Metric name to look for (case-sensitive)

    Returns:
        MetricSample for the first matching line

    Raises:
        MetricNotFoundError: If no line matches
        MalformedValueError: If the matching line's value is not a float
    """
    for line in document.split("\n"):
        parts = line.split()
        if len(parts) != 2 or parts[0] != name:
            continue
        return MetricSample(name=name, value=_parse_value(name, parts[1]))

    raise MetricNotFoundError(message=f"metric {name} not found", data={"metric": name})


class MetricsScraper:
    """Fetches the scrape endpoint over the shared client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    def _get_headers(self) -> dict[str, str]:
        api_key = self.settings.api_key
        return auth_headers(api_key) if api_key else {}

    async def fetch(self) -> str:
        """GET the scrape endpoint and return the whole body as text.

        Raises:
            TransportError: On an unusable URL, connection failure, timeout or non-2xx status
        """
        url = self.settings.metrics_url

        try:
            response = await self.client.get(url, headers=self._get_headers())
        except httpx.InvalidURL as e:
            raise TransportError(
                message=f"failed to create metrics request: {e}",
                data={"url": url},
            ) from e
        except httpx.TimeoutException as e:
            raise map_connection_error(str(e) or type(e).__name__, url, is_timeout=True) from e
        except httpx.RequestError as e:
            raise map_connection_error(str(e) or type(e).__name__, url) from e

        if not response.is_success:
            error = map_http_error(response.status_code, response.reason_phrase, url)
            raise TransportError(
                code=error.code,
                message=f"failed to fetch metrics from endpoint: {error.message}",
                retryable=error.retryable,
                data=error.data,
            )

        logger.info("fetched metrics data", url=url, size=len(response.content))
        return response.text

    async def scrape(self, name: str) -> MetricSample:
        """Fetch the document and look up a single metric."""
        document = await self.fetch()
        return find_metric(document, name)
