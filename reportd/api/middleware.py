"""
reportd/api/middleware.py

RequestLoggingMiddleware
    Binds a request id and the requested ``tidb_cluster_id`` into structlog's
    context variables for the lifetime of the request, so the engine and
    backend log lines emitted while serving it carry both.  Writes one
    summary line per request, at warning level for 4xx and error level for
    5xx.  The request id is echoed in the ``X-Request-ID`` response header.
"""
from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_UNLOGGED_PATHS: frozenset[str] = frozenset(
    {"/health", "/docs", "/redoc", "/openapi.json"}
)


def request_context(request: Request) -> dict[str, str]:
    """Log context for *request*: its id and, when given, the cluster."""
    context = {"request_id": request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex}
    cluster_id = request.query_params.get("tidb_cluster_id")
    if cluster_id:
        context["cluster_id"] = cluster_id
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        context = request_context(request)
        path = request.url.path

        with structlog.contextvars.bound_contextvars(**context):
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("http_request_failed", method=request.method, path=path)
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

            if path not in _UNLOGGED_PATHS:
                if response.status_code >= 500:
                    log = logger.error
                elif response.status_code >= 400:
                    log = logger.warning
                else:
                    log = logger.info
                log(
                    "http_request",
                    method=request.method,
                    path=path,
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                )

        response.headers[REQUEST_ID_HEADER] = context["request_id"]
        return response
