"""
reportd/diagnosis/dependency_graph.py

The static dependency graph between diagnostic checks.

Each key is a CheckID and its value lists the checks it can explain,
i.e. the downstream dependents that are drawn as edges when both ends are
active.  The table is loaded once at startup (the built-in table or a JSON
file named by ``settings.dependency_graph_file``) and is read-only for the
lifetime of the process.
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

import structlog

from reportd.diagnosis.decoding import parse_check_id

logger = structlog.get_logger(__name__)

# Checks are numbered 0xLLNN: LL is the layer, NN the check within it.
DEFAULT_EDGES: dict[int, list[int]] = {
    0x0000: [0x0100, 0x0101, 0x0102],
    0x0001: [0x0102, 0x0103, 0x0104],
    0x0100: [0x0200, 0x0205],
    0x0101: [0x0201, 0x0206],
    0x0102: [0x0202, 0x0207],
    0x0103: [0x0203, 0x0208],
    0x0104: [0x0204, 0x0209],
    0x0200: [],
    0x0201: [],
    0x0202: [],
    0x0203: [],
    0x0204: [],
    0x0205: [],
    0x0206: [],
    0x0207: [],
    0x0208: [],
    0x0209: [],
}


class DependencyGraph(Mapping[int, tuple[int, ...]]):
    """Immutable adjacency lists indexed by CheckID."""

    __slots__ = ("_edges",)

    def __init__(self, edges: Mapping[int, Iterable[int]]) -> None:
        self._edges: Mapping[int, tuple[int, ...]] = MappingProxyType(
            {int(source): tuple(int(t) for t in targets) for source, targets in edges.items()}
        )

    def successors(self, check_id: int) -> tuple[int, ...]:
        """Downstream dependents of *check_id*; empty for leaves and unknown ids."""
        return self._edges.get(check_id, ())

    def __getitem__(self, check_id: int) -> tuple[int, ...]:
        return self._edges[check_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self)})"

    @classmethod
    def from_json(cls, path: Path) -> DependencyGraph:
        """Load a table shaped ``{"0x0100": ["0x0200", 512], ...}``.

        Keys and targets may be integer literals in any base accepted by
        parse_check_id, or plain JSON integers for targets.

        Raises:
            ValueError: the file is not such an object or an id does not parse.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a JSON object of adjacency lists")

        edges: dict[int, list[int]] = {}
        for source, targets in raw.items():
            if not isinstance(targets, list):
                raise ValueError(f"{path}: dependents of {source!r} must be a list")
            edges[parse_check_id(source)] = [
                t if isinstance(t, int) else parse_check_id(str(t)) for t in targets
            ]
        return cls(edges)


_graph: DependencyGraph | None = None


def init_dependency_graph(path: Path | None = None) -> DependencyGraph:
    """Load the process-wide table (called on app startup)."""
    global _graph
    if path is None:
        _graph = DependencyGraph(DEFAULT_EDGES)
        source = "builtin"
    else:
        _graph = DependencyGraph.from_json(path)
        source = str(path)
    logger.info("dependency_graph_loaded", source=source, nodes=len(_graph))
    return _graph


def get_dependency_graph() -> DependencyGraph:
    """FastAPI dependency that returns the loaded table."""
    if _graph is None:
        raise RuntimeError("Dependency graph not loaded. Call init_dependency_graph() first.")
    return _graph
