"""
reportd/ingestion/writer.py

Store raw diagnosis samples posted by the analysis jobs.

The sample is converted to an InfluxDB Point (measurement, tags including
``tidb_cluster_id``, fields, second-resolution timestamp) and handed to the
active backend, which either writes it to the bucket or forwards it as line
protocol to the metrics store.
"""
from __future__ import annotations

from datetime import datetime, timezone

import structlog
from influxdb_client import Point

from reportd.backends.base import QueryBackend
from reportd.errors import InvalidRequest
from reportd.models.schemas.sample import InsertSampleRequest

logger = structlog.get_logger(__name__)

CLUSTER_TAG = "tidb_cluster_id"


def validate_sample(request: InsertSampleRequest) -> None:
    """Raise InvalidRequest for a zero timestamp or missing identifiers."""
    if request.timestamp == 0:
        raise InvalidRequest("timestamp is empty")
    if not request.measurement:
        raise InvalidRequest("measurement is empty")
    if not request.tidb_cluster_id:
        raise InvalidRequest("tidb_cluster_id is empty")


def build_point(request: InsertSampleRequest) -> Point:
    """Convert a validated request into a Point."""
    point = Point(request.measurement)
    tags = {**request.tags, CLUSTER_TAG: request.tidb_cluster_id}
    for key, value in tags.items():
        point.tag(key, value)
    for key, value in request.fields.items():
        point.field(key, value)
    return point.time(datetime.fromtimestamp(request.timestamp, tz=timezone.utc))


async def insert_sample(backend: QueryBackend, request: InsertSampleRequest) -> Point:
    """Validate and store *request*; return the written point."""
    validate_sample(request)
    point = build_point(request)
    await backend.write(point)
    logger.info(
        "sample_inserted",
        measurement=request.measurement,
        cluster_id=request.tidb_cluster_id,
        fields=len(request.fields),
    )
    return point
