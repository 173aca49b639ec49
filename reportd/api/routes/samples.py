"""
reportd/api/routes/samples.py

POST /sample
    Store one raw diagnosis sample in the active backend.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from reportd.backends import get_backend
from reportd.backends.base import QueryBackend
from reportd.ingestion.writer import insert_sample
from reportd.models.schemas.sample import InsertSampleRequest, InsertSampleResponse

router = APIRouter()


@router.post(
    "/sample",
    response_model=InsertSampleResponse,
    summary="Insert a diagnosis sample",
)
async def post_sample(
    body: InsertSampleRequest,
    backend: QueryBackend = Depends(get_backend),
) -> InsertSampleResponse:
    """Returns HTTP 400 when timestamp, measurement or cluster id is missing."""
    await insert_sample(backend, body)
    return InsertSampleResponse()
