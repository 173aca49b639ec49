"""
reportd/api/routes/graph.py

GET /node_graph
    Node graph of the diagnostic checks active in the window, plus the
    dependencies between them, in the shape expected by Grafana's node
    graph panel.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from reportd.api.routes import time_window
from reportd.backends import get_backend
from reportd.backends.base import QueryBackend
from reportd.diagnosis.dependency_graph import DependencyGraph, get_dependency_graph
from reportd.diagnosis.subgraph import query_node_graph
from reportd.diagnosis.window import TimeWindow
from reportd.models.schemas.graph import NodeGraphResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/node_graph",
    response_model=NodeGraphResponse,
    response_model_exclude_none=True,
    summary="Get the active diagnosis node graph",
)
async def get_node_graph(
    window: TimeWindow = Depends(time_window),
    backend: QueryBackend = Depends(get_backend),
    graph: DependencyGraph = Depends(get_dependency_graph),
) -> NodeGraphResponse:
    """Return one node per active check and the edges among active checks.

    Returns HTTP 400 for an invalid window and 502 when the backend fails.
    """
    logger.info("node_graph_requested", cluster_id=window.cluster_id, backend=backend.name)
    return await query_node_graph(backend, graph, window)
