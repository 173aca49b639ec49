"""
reportd/api/routes/annotations.py

POST /annotations
    Anomaly timeline for the window.  Parameters are read from the query
    string, as sent by the Grafana JSON datasource.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from reportd.api.routes import time_window
from reportd.backends import get_backend
from reportd.backends.base import QueryBackend
from reportd.diagnosis.annotations import query_annotations
from reportd.diagnosis.window import TimeWindow
from reportd.models.schemas.annotation import AnnotationEvent

router = APIRouter()


@router.post(
    "/annotations",
    response_model=list[AnnotationEvent],
    response_model_exclude_none=True,
    summary="Get anomaly annotations",
)
async def post_annotations(
    window: TimeWindow = Depends(time_window),
    measurement: str = Query(default="", description="Override the anomaly measurement"),
    backend: QueryBackend = Depends(get_backend),
) -> list[AnnotationEvent]:
    return await query_annotations(backend, window, measurement or None)
