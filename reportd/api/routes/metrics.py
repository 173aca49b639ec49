"""
reportd/api/routes/metrics.py

GET /api/v1/query_range
    Pass-through to the metrics store so dashboards can chart the raw
    diagnosis series through this service.
"""
from __future__ import annotations

from fastapi import APIRouter, Request, Response

from reportd.backends.prometheus import metrics_forwarder

router = APIRouter()


@router.get("/api/v1/query_range", summary="Forward a range query to the metrics store")
async def forward_query_range(request: Request) -> Response:
    upstream = await metrics_forwarder.query_range(list(request.query_params.multi_items()))
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
