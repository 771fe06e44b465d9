"""QueryExecutor - turns a batch of queries into a response envelope.

A batch is scraped once. Every query gets exactly one entry keyed by its
own id, holding either a one-row frame or an error message.
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from .errors import MalformedValueError, MetricNotFoundError, TransportError, ValidationError
from .scrape import MetricSample, MetricsScraper, find_metric

logger = structlog.get_logger(__name__)

FRAME_NAME = "metrics"


@dataclass(frozen=True)
class Query:
    """Decoded query payload."""

    metric_name: str


@dataclass(frozen=True)
class DataQuery:
    """One incoming query: an id plus an opaque JSON payload."""

    ref_id: str
    payload: bytes | str | Mapping[str, Any]


@dataclass(frozen=True)
class Frame:
    """Columnar record returned for a successful query."""

    name: str
    fields: dict[str, list[Any]]

    @classmethod
    def from_sample(cls, sample: MetricSample) -> "Frame":
        return cls(
            name=FRAME_NAME,
            fields={"metric_name": [sample.name], "metric_value": [sample.value]},
        )

    def row(self, index: int = 0) -> dict[str, Any]:
        return {key: values[index] for key, values in self.fields.items()}


@dataclass(frozen=True)
class DataResponse:
    """Result for one query: frames or an error, never both."""

    frames: list[Frame] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"frame": self.frames[0].row()}


@dataclass
class QueryDataResponse:
    """Mapping from query id to its DataResponse."""

    responses: dict[str, DataResponse] = field(default_factory=dict)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {ref_id: response.to_dict() for ref_id, response in self.responses.items()}


def decode_query(payload: bytes | str | Mapping[str, Any]) -> Query:
    """Decode a query payload of the form ``{"metric": "<name>"}``.

    An absent or empty metric decodes to an empty name; the batch decides
    whether that is acceptable.

    Raises:
        ValidationError: If the payload is not a JSON object or metric is not a string
    """
    if isinstance(payload, Mapping):
        data: Any = payload
    else:
        try:
            data = json.loads(payload or "{}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(message=f"failed to unmarshal query JSON: {e}") from e

    if not isinstance(data, Mapping):
        raise ValidationError(message="failed to unmarshal query JSON: expected an object")

    metric = data.get("metric")
    if metric is None:
        metric = ""
    if not isinstance(metric, str):
        raise ValidationError(
            message=f"failed to unmarshal query JSON: metric must be a string, got {metric!r}"
        )

    return Query(metric_name=metric.strip())


def resolve_metric_name(queries: Sequence[Query]) -> str:
    """Return the first non-empty metric name in batch order.

    Raises:
        ValidationError: If no query names a metric
    """
    for query in queries:
        if query.metric_name:
            return query.metric_name
    raise ValidationError(message="no metric specified in the query")


class QueryExecutor:
    """Executes query batches against the scrape endpoint."""

    def __init__(self, scraper: MetricsScraper):
        self.scraper = scraper

    async def execute(self, queries: Sequence[DataQuery]) -> QueryDataResponse:
        """Execute a batch of queries with a single scrape.

        Args:
            queries: Incoming queries in batch order

        Returns:
            QueryDataResponse with one entry per query

        Raises:
            ValidationError: If a payload is unparsable or no query names a metric
        """
        decoded = [decode_query(query.payload) for query in queries]
        batch_metric = resolve_metric_name(decoded)

        response = QueryDataResponse()
        try:
            document = await self.scraper.fetch()
        except TransportError as e:
            logger.warning("scrape failed", metric=batch_metric, error=e.message)
            for query in queries:
                response.responses[query.ref_id] = DataResponse(error=e.message)
            return response

        for query, parsed in zip(queries, decoded):
            metric_name = parsed.metric_name or batch_metric
            response.responses[query.ref_id] = self._lookup(document, metric_name)

        return response

    def _lookup(self, document: str, metric_name: str) -> DataResponse:
        try:
            sample = find_metric(document, metric_name)
        except (MetricNotFoundError, MalformedValueError) as e:
            logger.info("metric lookup failed", metric=metric_name, error=e.message)
            return DataResponse(error=e.message)
        return DataResponse(frames=[Frame.from_sample(sample)])
