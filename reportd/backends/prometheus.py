"""
reportd/backends/prometheus.py

Prometheus-compatible backend (VictoriaMetrics HTTP API).

Queries
-------
FIRST mode renders ``first_over_time(<selector>[<window>s])`` evaluated at
the window end and expects an instant vector.  RANGE mode renders the bare
range selector and expects a matrix, which is flattened to one Sample per
(series, point) pair.

Writes
------
Points are encoded as InfluxDB line protocol and posted to the store's
``/influx/api/v2/write`` endpoint, where each field becomes a metric named
``<measurement>_<field>``.

MetricsForwarder relays raw ``/api/v1/query_range`` calls to the same store
for dashboards that query it directly.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import structlog
from influxdb_client import Point

from reportd.backends.base import QueryBackend, QueryMode, Sample, SampleQuery
from reportd.config import settings
from reportd.errors import BackendUnavailable, ShapeMismatch

logger = structlog.get_logger(__name__)

_EXPECTED_SHAPE: dict[QueryMode, str] = {
    QueryMode.FIRST: "vector",
    QueryMode.RANGE: "matrix",
}


def _quote(value: str) -> str:
    """Escape *value* for use inside a double-quoted PromQL string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_promql(query: SampleQuery) -> tuple[str, int]:
    """Render *query* as PromQL and return ``(expression, evaluation_ts)``."""
    ts, duration = query.window.rollup()
    selector = (
        f'{{__name__=~"{_quote(query.measurement)}.*",'
        f'tidb_cluster_id="{_quote(query.window.cluster_id)}"}}[{duration}s]'
    )
    if query.mode is QueryMode.RANGE:
        return selector, ts

    expr = f"first_over_time({selector})"
    if query.min_value is not None:
        expr = f"{expr} >= {float(query.min_value)!r}"
    return expr, ts


def _decode_value(raw: Any) -> Any:
    """Convert a Prometheus string sample to float; pass anything else through."""
    try:
        return float(raw)
    except (TypeError, ValueError):
        return raw


def _decode_time(raw: Any) -> datetime | None:
    try:
        return datetime.fromtimestamp(float(raw), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def _series_samples(series: dict[str, Any], shape: str) -> list[Sample]:
    """Flatten one result series into Samples.  Malformed points are dropped."""
    metric = series.get("metric")
    if not isinstance(metric, dict):
        logger.warning("prometheus_series_skipped", reason="metric is not an object")
        return []
    labels = {str(k): str(v) for k, v in metric.items() if k != "__name__"}
    name = metric.get("__name__")

    points = [series.get("value")] if shape == "vector" else series.get("values")
    if not isinstance(points, list):
        logger.warning("prometheus_series_skipped", metric=name, reason="no points")
        return []

    samples: list[Sample] = []
    for point in points:
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            logger.warning("prometheus_point_skipped", metric=name, point=point)
            continue
        ts, raw = point
        samples.append(
            Sample(
                tags=dict(labels),
                value=_decode_value(raw),
                timestamp=_decode_time(ts),
                field=name,
            )
        )
    return samples


def decode_response(body: Any, expected: str) -> list[Sample]:
    """Decode a ``/api/v1/query`` JSON body into Samples.

    Raises:
        BackendUnavailable: the body does not report success.
        ShapeMismatch:      ``data`` is not an object, ``resultType`` differs
                            from *expected*, or ``result`` is not a list.
    """
    if not isinstance(body, dict) or body.get("status") != "success":
        error = body.get("error", "unknown error") if isinstance(body, dict) else "malformed body"
        raise BackendUnavailable(PrometheusBackend.name, str(error))

    data = body.get("data")
    if not isinstance(data, dict):
        raise ShapeMismatch(expected, type(data).__name__)
    actual = data.get("resultType")
    if actual != expected:
        raise ShapeMismatch(expected, str(actual))

    result = data.get("result")
    if result is None:
        result = []
    if not isinstance(result, list):
        raise ShapeMismatch(expected, f"{actual} with {type(result).__name__} result")
    samples: list[Sample] = []
    for series in result:
        if isinstance(series, dict):
            samples.extend(_series_samples(series, actual))
    return samples


class PrometheusBackend(QueryBackend):
    """QueryBackend over a Prometheus-compatible HTTP API."""

    name = "prometheus"
    qualified_field_names = True

    def __init__(
        self,
        base_url: str = settings.prometheus_url,
        timeout: float = settings.prometheus_request_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def query(self, query: SampleQuery) -> list[Sample]:
        expr, ts = render_promql(query)
        payload = {"query": expr, "time": str(ts)}
        try:
            async with self._client() as client:
                response = await client.post("/api/v1/query", data=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("prometheus_query_failed", query=expr, error=str(exc))
            raise BackendUnavailable(self.name, str(exc)) from exc

        samples = decode_response(body, _EXPECTED_SHAPE[query.mode])
        logger.debug("prometheus_query_done", query=expr, samples=len(samples))
        return samples

    async def write(self, point: Point) -> None:
        payload = point.to_line_protocol()
        try:
            async with self._client() as client:
                response = await client.post("/influx/api/v2/write", content=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("prometheus_write_failed", payload=payload, error=str(exc))
            raise BackendUnavailable(self.name, str(exc)) from exc
        logger.debug("prometheus_point_written", payload=payload)


class MetricsForwarder:
    """Relay ``/api/v1/query_range`` requests to the metrics store unchanged."""

    def __init__(
        self,
        base_url: str = settings.prometheus_url,
        timeout: float = settings.prometheus_request_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport

    async def query_range(self, params: list[tuple[str, str]]) -> httpx.Response:
        """Forward *params* verbatim and return the upstream response."""
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get("/api/v1/query_range", params=params)
        except httpx.HTTPError as exc:
            logger.error("metrics_forward_failed", error=str(exc))
            raise BackendUnavailable("prometheus", str(exc)) from exc
        logger.info("metrics_forwarded", status_code=response.status_code)
        return response


# Module-level singleton
metrics_forwarder = MetricsForwarder()
