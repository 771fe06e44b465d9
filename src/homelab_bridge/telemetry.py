"""Bridge self-telemetry.

Counters are owned by a BridgeTelemetry object with its own registry and
passed into the bridge, so several bridges in one process never collide.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    start_http_server,
)

NAMESPACE = "grafana_plugin"

QUERY_TYPE_METRIC = "metric"


class BridgeTelemetry:
    """Counters for query and health-check activity."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.queries_total = Counter(
            "queries_total",
            "Total number of queries.",
            labelnames=["query_type"],
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.health_checks_total = Counter(
            "health_checks_total",
            "Total number of health check calls.",
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.health_check_duration = Histogram(
            "health_check_duration_seconds",
            "Duration of health check requests.",
            namespace=NAMESPACE,
            registry=self.registry,
        )

    def record_query(self, query_type: str = QUERY_TYPE_METRIC, count: int = 1) -> None:
        self.queries_total.labels(query_type=query_type).inc(count)

    def record_health_check(self, duration_seconds: float) -> None:
        self.health_checks_total.inc()
        self.health_check_duration.observe(duration_seconds)

    def render(self) -> str:
        """Render the registry in the text exposition format."""
        return generate_latest(self.registry).decode("utf-8")

    def serve(self, port: int, addr: str = "0.0.0.0"):
        """Expose the registry over HTTP on a background thread.

        Returns:
            (server, thread) tuple; call server.shutdown() to stop
        """
        return start_http_server(port, addr=addr, registry=self.registry)
