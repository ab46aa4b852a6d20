"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from traceguard.config.settings import Settings
from traceguard.observability.metrics import MetricsRegistry
from traceguard.pipeline.orchestrator import AskPipeline


def get_pipeline(request: Request) -> AskPipeline:
    return request.app.state.pipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics_registry(request: Request) -> MetricsRegistry:
    return request.app.state.metrics
