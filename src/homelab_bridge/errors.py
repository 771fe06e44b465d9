"""Error taxonomy for the metrics bridge.

Maps configuration problems, bad caller input, HTTP/connection failures and
scrape lookups onto a small set of structured errors.
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

# Error codes
BRIDGE_CONFIGURATION_ERROR = 1001
BRIDGE_VALIDATION_ERROR = 1002
BRIDGE_TRANSPORT_ERROR = 1003
BRIDGE_TIMEOUT_ERROR = 1004
BRIDGE_METRIC_NOT_FOUND = 1005
BRIDGE_MALFORMED_VALUE = 1006


@dataclass
class BridgeError(Exception):
    """Base error class for bridge errors."""

    code: int
    message: str
    retryable: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain error object."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


@dataclass
class ConfigurationError(BridgeError):
    """Bad or missing settings, secrets or transport options. Never retried."""

    code: int = BRIDGE_CONFIGURATION_ERROR
    message: str = "Invalid configuration"
    retryable: bool = False


@dataclass
class ValidationError(BridgeError):
    """Malformed caller input, rejected before any network call."""

    code: int = BRIDGE_VALIDATION_ERROR
    message: str = "Invalid query"
    retryable: bool = False


@dataclass
class TransportError(BridgeError):
    """Network or HTTP failure talking to the monitored system."""

    code: int = BRIDGE_TRANSPORT_ERROR
    message: str = "Transport error"
    retryable: bool = False


@dataclass
class MetricNotFoundError(BridgeError):
    """Requested metric is absent from the scraped document."""

    code: int = BRIDGE_METRIC_NOT_FOUND
    message: str = "Metric not found"
    retryable: bool = False


@dataclass
class MalformedValueError(BridgeError):
    """Metric line was found but its value token is not a float."""

    code: int = BRIDGE_MALFORMED_VALUE
    message: str = "Malformed metric value"
    retryable: bool = False


def map_http_error(status_code: int, reason: str, url: str) -> TransportError:
    """Map a non-2xx HTTP response to a TransportError.

    Args:
        status_code: HTTP status code
        reason: Reason phrase from the response (may be empty)
        url: URL that was requested

    Returns:
        TransportError whose message carries the status line
    """
    status_line = f"{status_code} {reason}".strip()
    if status_code in (408, 504):
        return TransportError(
            code=BRIDGE_TIMEOUT_ERROR,
            message=f"Request timeout: {status_line}",
            retryable=True,
            data={"url": url, "http_status": status_code},
        )
    return TransportError(
        message=f"Unexpected response: {status_line}",
        # Gateway errors may be retryable
        retryable=status_code in (502, 503),
        data={"url": url, "http_status": status_code},
    )


def map_connection_error(error_message: str, url: str, is_timeout: bool = False) -> TransportError:
    """Map a connection-level failure to a TransportError.

    Args:
        error_message: Error message from the exception
        url: URL that was being accessed
        is_timeout: Whether this was a timeout error

    Returns:
        Retryable TransportError
    """
    if is_timeout:
        return TransportError(
            code=BRIDGE_TIMEOUT_ERROR,
            message=f"Request timeout connecting to {url}: {error_message}",
            retryable=True,
            data={"url": url, "original_error": error_message},
        )

    parsed = urlparse(url)
    host_port = f"{parsed.hostname}:{parsed.port}" if parsed.port else parsed.hostname

    return TransportError(
        message=f"Request error: cannot reach {host_port}: {error_message}",
        retryable=True,
        data={"url": url, "original_error": error_message},
    )
