"""
tests/api/conftest.py

Shared fixtures for API route tests.

The `client` fixture:
  - Patches the lifespan hooks (backend creation, dependency table loading)
    so no time-series store is required.
  - Overrides get_backend with the `backend` AsyncMock fixture and
    get_dependency_graph with the built-in table.
  - Clears dependency_overrides after each test to avoid cross-test leakage.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from reportd.backends import get_backend
from reportd.backends.base import QueryBackend
from reportd.diagnosis.dependency_graph import DEFAULT_EDGES, DependencyGraph, get_dependency_graph
from reportd.main import app

# A valid window for routes that require one.
WINDOW_PARAMS = {
    "start_ts": 1_700_000_000,
    "end_ts": 1_700_003_600,
    "tidb_cluster_id": "c1",
}


@pytest.fixture()
def backend() -> AsyncMock:
    """QueryBackend stand-in; set .query.return_value / .side_effect per test."""
    stub = AsyncMock(spec=QueryBackend)
    stub.name = "stub"
    stub.qualified_field_names = False
    stub.query.return_value = []
    return stub


@pytest.fixture()
def client(backend: AsyncMock) -> TestClient:  # type: ignore[return]
    """Return a TestClient with the backend and dependency table overridden."""
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_dependency_graph] = lambda: DependencyGraph(DEFAULT_EDGES)

    with (
        patch("reportd.main.init_backend"),
        patch("reportd.main.close_backend"),
        patch("reportd.main.init_dependency_graph"),
    ):
        with TestClient(app, raise_server_exceptions=True) as c:
            yield c

    app.dependency_overrides.clear()
