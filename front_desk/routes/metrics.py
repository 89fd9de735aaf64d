"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP front_desk_booking_transitions_total Booking lifecycle operations by outcome
        # TYPE front_desk_booking_transitions_total counter
        front_desk_booking_transitions_total{outcome="success",transition="check_in"} 12.0
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
    """
    Prometheus metrics endpoint.

    Returns:
        Response: Metrics in Prometheus text exposition format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
