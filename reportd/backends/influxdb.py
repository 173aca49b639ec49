"""
reportd/backends/influxdb.py

InfluxDB 2.x backend (Flux queries over a bucket).

Queries are rendered as Flux with the bucket, measurement and cluster id
bound through query parameters, so no caller-supplied string is spliced
into the query text.  One Sample is produced per returned record, in the
order the tables and records come back.
"""
from __future__ import annotations

from typing import Any

import aiohttp
import structlog
from influxdb_client import Point
from influxdb_client.client.flux_table import FluxRecord
from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync
from influxdb_client.rest import ApiException

from reportd.backends.base import QueryBackend, QueryMode, Sample, SampleQuery
from reportd.config import settings
from reportd.errors import BackendUnavailable

logger = structlog.get_logger(__name__)

# Columns Flux adds to every record that are not series tags.
_RESERVED_COLUMNS: frozenset[str] = frozenset({"result", "table"})

# Failures that mean "the store did not answer", as opposed to a bug.
_TRANSPORT_ERRORS = (ApiException, aiohttp.ClientError, TimeoutError)


def render_flux(query: SampleQuery) -> str:
    """Render *query* as Flux text expecting ``params.bucket``,
    ``params.measurement`` and ``params.cluster_id`` to be bound."""
    window = query.window
    columns = ", ".join(f'"{column}"' for column in query.group_by)
    lines = [
        "from(bucket: params.bucket)",
        f"  |> range(start: {int(window.start_ts)}, stop: {int(window.end_ts)})",
        "  |> filter(fn: (r) => r._measurement == params.measurement"
        " and r.tidb_cluster_id == params.cluster_id)",
    ]
    if query.mode is QueryMode.FIRST:
        lines.append(f"  |> group(columns: [{columns}])")
        lines.append("  |> first()")
    if query.mode is QueryMode.FIRST and query.min_value is not None:
        lines.append(f"  |> filter(fn: (r) => r._value >= {float(query.min_value)!r})")
    if query.mode is QueryMode.FIRST and query.group_by:
        lines.append(f"  |> sort(columns: [{columns}])")
    return "\n".join(lines)


def record_to_sample(record: FluxRecord) -> Sample:
    """Convert a Flux record into a backend-neutral Sample."""
    values: dict[str, Any] = record.values
    tags = {
        key: value
        for key, value in values.items()
        if isinstance(value, str)
        and not key.startswith("_")
        and key not in _RESERVED_COLUMNS
    }
    return Sample(
        tags=tags,
        value=values.get("_value"),
        timestamp=values.get("_time"),
        field=values.get("_field"),
    )


class InfluxDBBackend(QueryBackend):
    """QueryBackend over the InfluxDB async client."""

    name = "influxdb"
    qualified_field_names = False

    def __init__(
        self,
        url: str = settings.influxdb_url,
        token: str = settings.influxdb_token,
        org: str = settings.influxdb_org,
        bucket: str = settings.influxdb_bucket,
        timeout_ms: int = settings.influxdb_timeout_ms,
        client: InfluxDBClientAsync | None = None,
    ) -> None:
        self._org = org
        self._bucket = bucket
        self._client = client or InfluxDBClientAsync(
            url=url,
            token=token,
            org=org,
            timeout=timeout_ms,
        )

    async def query(self, query: SampleQuery) -> list[Sample]:
        flux = render_flux(query)
        params = {
            "bucket": self._bucket,
            "measurement": query.measurement,
            "cluster_id": query.window.cluster_id,
        }
        try:
            tables = await self._client.query_api().query(flux, org=self._org, params=params)
        except _TRANSPORT_ERRORS as exc:
            logger.error(
                "influxdb_query_failed",
                measurement=query.measurement,
                cluster_id=query.window.cluster_id,
                error=str(exc),
            )
            raise BackendUnavailable(self.name, str(exc)) from exc

        samples = [record_to_sample(record) for table in tables for record in table.records]
        logger.debug(
            "influxdb_query_done",
            measurement=query.measurement,
            mode=query.mode.value,
            samples=len(samples),
        )
        return samples

    async def write(self, point: Point) -> None:
        try:
            await self._client.write_api().write(bucket=self._bucket, org=self._org, record=point)
        except _TRANSPORT_ERRORS as exc:
            logger.error("influxdb_write_failed", error=str(exc))
            raise BackendUnavailable(self.name, str(exc)) from exc
        logger.debug("influxdb_point_written", point=point.to_line_protocol())

    async def close(self) -> None:
        await self._client.close()
