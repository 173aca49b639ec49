"""
reportd/diagnosis/window.py

The per-request time window every diagnosis query is scoped to.
"""
from __future__ import annotations

from dataclasses import dataclass

from reportd.errors import InvalidRequest


@dataclass(frozen=True)
class TimeWindow:
    """A closed time range (unix seconds) on one TiDB cluster."""

    start_ts: int
    end_ts: int
    cluster_id: str

    def validate(self) -> TimeWindow:
        """Raise InvalidRequest unless the window is usable; return self."""
        if self.start_ts == 0:
            raise InvalidRequest("start_ts is zero", {"start_ts": self.start_ts})
        if self.end_ts == 0:
            raise InvalidRequest("end_ts is zero", {"end_ts": self.end_ts})
        if not self.cluster_id:
            raise InvalidRequest("tidb_cluster_id is empty")
        if self.end_ts <= self.start_ts:
            raise InvalidRequest(
                "end_ts must be after start_ts",
                {"start_ts": self.start_ts, "end_ts": self.end_ts},
            )
        return self

    def rollup(self) -> tuple[int, int]:
        """Return ``(evaluation_ts, duration_seconds)`` for a roll-up query."""
        return self.end_ts, self.end_ts - self.start_ts
