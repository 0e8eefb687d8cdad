"""Metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape target.

    Tool latency and errors, video enrichment outcomes, chat turn counts and
    durations.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
