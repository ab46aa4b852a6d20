"""Prometheus scrape endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from traceguard.api.dependencies import get_metrics_registry
from traceguard.observability.metrics import MetricsRegistry

router = APIRouter()


@router.get("/metrics")
async def metrics(registry: MetricsRegistry = Depends(get_metrics_registry)) -> Response:
    content_type, payload = registry.render()
    return Response(content=payload, media_type=content_type)
