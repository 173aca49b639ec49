"""
reportd/api/routes/__init__.py

Shared FastAPI dependencies used across the route modules.
"""
from fastapi import Query

from reportd.diagnosis.window import TimeWindow


def time_window(
    start_ts: int = Query(default=0, description="Window start, unix seconds"),
    end_ts: int = Query(default=0, description="Window end, unix seconds"),
    tidb_cluster_id: str = Query(default="", description="Cluster to diagnose"),
) -> TimeWindow:
    """Build and validate the request window.

    Missing parameters default to zero / empty so they are rejected by
    TimeWindow.validate() as InvalidRequest (HTTP 400).
    """
    return TimeWindow(start_ts=start_ts, end_ts=end_ts, cluster_id=tidb_cluster_id).validate()
