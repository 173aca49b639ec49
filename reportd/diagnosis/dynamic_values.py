"""
reportd/diagnosis/dynamic_values.py

Flatten the diagnosis overview measurement into named scalar values.

The ``format`` tag of each sample decides how its value is stored:

  float          raw value
  int            value truncated toward zero
  unix_seconds   truncated value, plus ``<key>_rfc3339`` holding the UTC
                 calendar time
  (other/none)   raw value
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from reportd.backends.base import QueryBackend, QueryMode, Sample, SampleQuery
from reportd.config import settings
from reportd.diagnosis.decoding import as_number, field_key
from reportd.diagnosis.window import TimeWindow

logger = structlog.get_logger(__name__)

FORMAT_TAG = "format"
RFC3339_SUFFIX = "_rfc3339"

DynamicValue = float | int | str


def format_rfc3339(seconds: int) -> str:
    """``1700000000`` → ``"2023-11-14T22:13:20Z"``."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def extract_dynamic_values(
    samples: Iterable[Sample],
    measurement: str,
    qualified: bool = False,
) -> dict[str, DynamicValue]:
    """Build the DynamicValueMap.  Later samples overwrite earlier keys."""
    values: dict[str, DynamicValue] = {}

    for sample in samples:
        value = as_number(sample.value)
        key = field_key(sample.field, measurement, qualified)
        if value is None or not key:
            logger.warning(
                "dynamic_value_skipped",
                field=sample.field,
                value=repr(sample.value),
            )
            continue

        fmt = sample.tags.get(FORMAT_TAG)
        if fmt == "int":
            values[key] = int(value)
        elif fmt == "unix_seconds":
            seconds = int(value)
            values[key] = seconds
            try:
                values[f"{key}{RFC3339_SUFFIX}"] = format_rfc3339(seconds)
            except (OverflowError, OSError, ValueError):
                logger.warning("dynamic_value_rfc3339_skipped", field=key, seconds=seconds)
        else:
            values[key] = value

    return values


async def query_dynamic_values(
    backend: QueryBackend,
    window: TimeWindow,
    measurement: str | None = None,
) -> dict[str, DynamicValue]:
    """Fetch the first value of every overview field in *window*."""
    measurement = measurement or settings.overview_measurement
    samples = await backend.query(
        SampleQuery(
            measurement=measurement,
            window=window,
            mode=QueryMode.FIRST,
            group_by=("_field",),
        )
    )
    values = extract_dynamic_values(samples, measurement, backend.qualified_field_names)
    logger.info("dynamic_values_built", cluster_id=window.cluster_id, keys=len(values))
    return values
