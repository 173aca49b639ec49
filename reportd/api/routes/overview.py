"""
reportd/api/routes/overview.py

GET /dynamic_text_value
    Named scalar values of the diagnosis overview, used to fill dynamic
    text panels.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from reportd.api.routes import time_window
from reportd.backends import get_backend
from reportd.backends.base import QueryBackend
from reportd.diagnosis.dynamic_values import DynamicValue, query_dynamic_values
from reportd.diagnosis.window import TimeWindow

router = APIRouter()


@router.get(
    "/dynamic_text_value",
    response_model=dict[str, DynamicValue],
    summary="Get diagnosis overview values",
)
async def get_dynamic_text_value(
    window: TimeWindow = Depends(time_window),
    measurement: str = Query(default="", description="Override the overview measurement"),
    backend: QueryBackend = Depends(get_backend),
) -> dict[str, DynamicValue]:
    return await query_dynamic_values(backend, window, measurement or None)
