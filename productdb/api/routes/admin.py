"""Operational endpoints: liveness and Prometheus metrics."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from productdb.core.config import settings
from productdb.utils.monitoring import render_metrics

router = APIRouter(tags=["admin"])
metrics_router = APIRouter(tags=["admin"])


@router.get("/health")
async def healthcheck() -> str:
    """Liveness probe."""

    return "OK"


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    if not settings.ENABLE_METRICS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics are disabled")
    payload, content_type = render_metrics()
    return Response(content=payload, media_type=content_type)
