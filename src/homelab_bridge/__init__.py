"""Homelab Bridge - metrics bridge and health monitor for a homelab datasource."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("homelab-bridge")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without metadata

from .datasource import Bridge
from .errors import (
    BridgeError,
    ConfigurationError,
    MalformedValueError,
    MetricNotFoundError,
    TransportError,
    ValidationError,
)
from .health import HealthProber, HealthStatus, HealthVerdict
from .query import DataQuery, DataResponse, Frame, Query, QueryDataResponse, QueryExecutor
from .scrape import MetricSample, MetricsScraper, find_metric
from .settings import SecretBundle, Settings, load_settings
from .telemetry import BridgeTelemetry
from .transport import TransportOptions, build_client

__all__ = [
    "__version__",
    # Bridge
    "Bridge",
    "BridgeTelemetry",
    # Settings + transport
    "Settings",
    "SecretBundle",
    "load_settings",
    "TransportOptions",
    "build_client",
    # Health
    "HealthProber",
    "HealthStatus",
    "HealthVerdict",
    # Queries
    "Query",
    "DataQuery",
    "DataResponse",
    "Frame",
    "QueryDataResponse",
    "QueryExecutor",
    "MetricSample",
    "MetricsScraper",
    "find_metric",
    # Errors
    "BridgeError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "MetricNotFoundError",
    "MalformedValueError",
]
