"""
tests/unit/test_dependency_graph.py

Unit tests for reportd.diagnosis.dependency_graph.

Coverage
--------
  successors: known id, leaf, unknown id, dependent that is not a key
  immutability: source mapping changes do not leak in; no item assignment
  from_json: hex/decimal keys and targets; non-object and non-list rejected
  init_dependency_graph / get_dependency_graph: builtin table, file table
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from reportd.diagnosis import dependency_graph as dg
from reportd.diagnosis.dependency_graph import DEFAULT_EDGES, DependencyGraph


class TestSuccessors:
    def test_known_id_returns_ordered_dependents(self) -> None:
        graph = DependencyGraph(DEFAULT_EDGES)
        assert graph.successors(0x0000) == (0x0100, 0x0101, 0x0102)

    def test_leaf_returns_empty(self) -> None:
        graph = DependencyGraph(DEFAULT_EDGES)
        assert graph.successors(0x0200) == ()

    def test_unknown_id_returns_empty(self) -> None:
        graph = DependencyGraph(DEFAULT_EDGES)
        assert graph.successors(0xFFFF) == ()

    def test_dependent_missing_as_key_is_leaf(self) -> None:
        graph = DependencyGraph({1: [2]})
        assert graph.successors(2) == ()


class TestImmutability:
    def test_copy_is_taken(self) -> None:
        edges = {1: [2]}
        graph = DependencyGraph(edges)
        edges[1].append(3)
        edges[4] = [5]
        assert graph.successors(1) == (2,)
        assert 4 not in graph

    def test_item_assignment_rejected(self) -> None:
        graph = DependencyGraph({1: [2]})
        with pytest.raises(TypeError):
            graph[1] = (3,)  # type: ignore[index]

    def test_mapping_protocol(self) -> None:
        graph = DependencyGraph({1: [2], 2: []})
        assert len(graph) == 2
        assert list(graph) == [1, 2]
        assert graph[1] == (2,)


class TestFromJson:
    def test_loads_hex_and_decimal(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"0x0100": ["0x0200", 515], "7": []}))
        graph = DependencyGraph.from_json(path)
        assert graph.successors(0x0100) == (0x0200, 515)
        assert graph.successors(7) == ()

    def test_non_object_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            DependencyGraph.from_json(path)

    def test_non_list_dependents_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"1": 2}))
        with pytest.raises(ValueError):
            DependencyGraph.from_json(path)

    def test_bad_id_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"node-a": []}))
        with pytest.raises(ValueError):
            DependencyGraph.from_json(path)


class TestProcessGraph:
    def test_builtin_table_loaded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(dg, "_graph", None)
        graph = dg.init_dependency_graph(None)
        assert dg.get_dependency_graph() is graph
        assert graph.successors(0x0001) == (0x0102, 0x0103, 0x0104)

    def test_file_table_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(dg, "_graph", None)
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"1": [2]}))
        dg.init_dependency_graph(path)
        assert dg.get_dependency_graph().successors(1) == (2,)

    def test_get_before_init_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(dg, "_graph", None)
        with pytest.raises(RuntimeError):
            dg.get_dependency_graph()
