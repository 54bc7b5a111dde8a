"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP stays_feed_syncs_total Total number of feed sync operations (success and failure)
        # TYPE stays_feed_syncs_total counter
        stays_feed_syncs_total{source="AIRBNB",status="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Return all registered metrics in the Prometheus text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
