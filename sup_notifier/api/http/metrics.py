"""Prometheus scrape endpoint for the notification channel metrics."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics() -> Response:
    """
    Connection, registration, liveness and delivery counters.

    Excluded from uvicorn access logs by `ExcludeMetricsFilter`.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
