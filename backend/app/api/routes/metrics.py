"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes:
    - signal_llm_latency_ms{operation, outcome}
    - signal_llm_errors_total{operation, reason}
    - signal_lifecycle_events_total{event}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
