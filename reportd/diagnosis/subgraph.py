"""
reportd/diagnosis/subgraph.py

Build the node-graph response: one node per active check and one edge per
dependency whose source *and* target are both active.

The result is exactly the subgraph of the dependency table induced by the
active set.  Only direct successors are examined, never transitive ones,
so a cycle in the table cannot cause unbounded traversal.
"""
from __future__ import annotations

from collections.abc import Mapping

import structlog

from reportd.backends.base import QueryBackend
from reportd.diagnosis.activation import ActivationRecord, fetch_activations
from reportd.diagnosis.dependency_graph import DependencyGraph
from reportd.diagnosis.window import TimeWindow
from reportd.models.schemas.graph import GraphEdge, GraphNode, NodeGraphResponse

logger = structlog.get_logger(__name__)


def format_check_id(check_id: int) -> str:
    """Display identifier of a check, shared by node ids and edge endpoints."""
    return str(check_id)


def edge_id(source: int, target: int) -> str:
    """Deterministic edge identifier, unique per ordered (source, target) pair."""
    return f"{format_check_id(source)}-{format_check_id(target)}"


def build_node(record: ActivationRecord) -> GraphNode:
    """Render one active check.  Arc fractions are value and 1 - value."""
    return GraphNode(
        id=format_check_id(record.check_id),
        title=record.raw_id or format_check_id(record.check_id),
        sub_title=record.label,
        main_stat=f"{record.value:.3f}",
        arc_positive=record.value,
        arc_negative=1 - record.value,
    )


def build_subgraph(
    activations: Mapping[int, ActivationRecord],
    graph: DependencyGraph,
) -> NodeGraphResponse:
    """Return the induced subgraph of *graph* over the active checks.

    Nodes follow the order of *activations*; edges follow node order, then
    the order of each node's successors in the table.
    """
    nodes = [build_node(record) for record in activations.values()]
    edges: list[GraphEdge] = []
    seen: set[tuple[int, int]] = set()

    for source in activations:
        for target in graph.successors(source):
            if target not in activations or (source, target) in seen:
                continue
            seen.add((source, target))
            edges.append(
                GraphEdge(
                    id=edge_id(source, target),
                    source=format_check_id(source),
                    target=format_check_id(target),
                )
            )

    return NodeGraphResponse(nodes=nodes, edges=edges)


async def query_node_graph(
    backend: QueryBackend,
    graph: DependencyGraph,
    window: TimeWindow,
) -> NodeGraphResponse:
    """Resolve the active checks in *window* and assemble their node graph."""
    activations = await fetch_activations(backend, window)
    response = build_subgraph(activations, graph)
    logger.info(
        "node_graph_built",
        cluster_id=window.cluster_id,
        nodes=len(response.nodes),
        edges=len(response.edges),
    )
    return response
