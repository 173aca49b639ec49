"""
reportd/backends/base.py

The query capability consumed by the diagnosis builders.

Builders describe *what* they need as a SampleQuery; each QueryBackend
renders it into its own query language and returns plain Sample objects,
so no builder ever sees Flux or PromQL.
"""
from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from influxdb_client import Point

from reportd.diagnosis.window import TimeWindow


class QueryMode(str, enum.Enum):
    """How a backend collapses the points of a series inside the window."""

    FIRST = "first"  # one representative value per series (instant vector)
    RANGE = "range"  # every point in the window (range matrix)


@dataclass(frozen=True)
class SampleQuery:
    """Backend-neutral description of one diagnosis query."""

    measurement: str
    window: TimeWindow
    mode: QueryMode = QueryMode.FIRST
    group_by: tuple[str, ...] = ()
    # Only honoured in FIRST mode.
    min_value: float | None = None


@dataclass(frozen=True)
class Sample:
    """One decoded result row.

    Attributes:
        tags:      String attributes of the series (id, title, format, …).
        value:     The raw value as the backend reported it.  Builders must
                   check the type themselves; non-numeric values are skipped.
        timestamp: Point time, when the backend reports one.
        field:     Field name.  Bare (``end_time``) for InfluxDB, the full
                   metric name (``fast_tune_anomaly_end_time``) for
                   Prometheus-compatible stores.
    """

    tags: dict[str, str] = field(default_factory=dict)
    value: Any = None
    timestamp: datetime | None = None
    field: str | None = None


class QueryBackend(ABC):
    """Abstract time-series store used by the diagnosis engine."""

    name: str = "backend"
    # True when Sample.field is ``<measurement>_<field>`` rather than ``<field>``.
    qualified_field_names: bool = False

    @abstractmethod
    async def query(self, query: SampleQuery) -> list[Sample]:
        """Execute *query* and return its samples in backend order.

        Raises:
            BackendUnavailable: transport failure or non-success response.
            ShapeMismatch:      the response shape does not fit query.mode.
        """
        ...

    @abstractmethod
    async def write(self, point: Point) -> None:
        """Persist a single point.

        Raises:
            BackendUnavailable: the store rejected or never received the point.
        """
        ...

    async def close(self) -> None:
        """Release network resources (called on app shutdown)."""
        return None
