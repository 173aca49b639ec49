"""
reportd/backends/__init__.py

Lifecycle of the process-wide QueryBackend selected by ``settings.backend``.
"""
from __future__ import annotations

from reportd.backends.base import QueryBackend
from reportd.config import settings

_backend: QueryBackend | None = None


def create_backend(kind: str) -> QueryBackend:
    """Instantiate the backend named *kind* (``influxdb`` or ``prometheus``)."""
    if kind == "influxdb":
        from reportd.backends.influxdb import InfluxDBBackend

        return InfluxDBBackend()
    if kind == "prometheus":
        from reportd.backends.prometheus import PrometheusBackend

        return PrometheusBackend()
    raise ValueError(f"unknown backend: {kind!r}")


async def init_backend() -> None:
    """Create the configured backend (called on app startup)."""
    global _backend
    _backend = create_backend(settings.backend)


async def close_backend() -> None:
    """Close the backend (called on app shutdown)."""
    global _backend
    if _backend is not None:
        await _backend.close()
        _backend = None


def get_backend() -> QueryBackend:
    """FastAPI dependency that returns the active backend."""
    if _backend is None:
        raise RuntimeError("Query backend not initialised. Call init_backend() first.")
    return _backend
