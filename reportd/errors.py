"""
reportd/errors.py

Error taxonomy for the diagnosis engine.

InvalidRequest      caller-supplied window or payload failed validation.
BackendUnavailable  the time-series store could not execute the query.
ShapeMismatch       the store answered with a result shape the query
                    cannot consume (e.g. a matrix for an instant query).

A malformed individual sample is not an error: builders drop it and log a
warning, so no exception type exists for that case.
"""
from __future__ import annotations

from typing import Any


class DiagnosisError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    status_code: int = 500
    code: str = "DIAGNOSIS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequest(DiagnosisError):
    """Time range, cluster id or sample payload failed validation."""

    status_code = 400
    code = "INVALID_REQUEST"


class BackendUnavailable(DiagnosisError):
    """The query adapter failed to execute or returned a non-success status."""

    status_code = 502
    code = "BACKEND_UNAVAILABLE"

    def __init__(self, backend: str, error: str) -> None:
        super().__init__(
            message=f"{backend} query failed: {error}",
            details={"backend": backend, "error": error},
        )


class ShapeMismatch(DiagnosisError):
    """The backend returned a value shape incompatible with the query."""

    status_code = 502
    code = "SHAPE_MISMATCH"

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            message=f"expected a {expected} result, got {actual}",
            details={"expected": expected, "actual": actual},
        )
