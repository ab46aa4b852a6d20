"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from traceguard import __version__
from traceguard.api.middleware import RequestTimingMiddleware
from traceguard.api.routes_ask import router as ask_router
from traceguard.api.routes_health import router as health_router
from traceguard.api.routes_metrics import router as metrics_router
from traceguard.config.settings import Settings
from traceguard.observability.logger import get_logger, setup_logging
from traceguard.observability.metrics import MetricsRegistry, get_metrics
from traceguard.observability.telemetry import init_telemetry, shutdown_telemetry
from traceguard.pipeline.factory import build_pipeline

logger = get_logger("app")


def create_app(
    settings: Settings | None = None, metrics: MetricsRegistry | None = None
) -> FastAPI:
    settings = settings or Settings()
    metrics = metrics or get_metrics()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_json)
        init_telemetry(settings)

        pipeline = build_pipeline(settings, metrics=metrics)
        app.state.pipeline = pipeline
        app.state.settings = settings
        app.state.metrics = metrics

        logger.info(
            "startup_complete",
            environment=settings.environment,
            retrieval_provider=settings.retrieval_provider,
            llm_provider=settings.llm_provider,
            tool_provider=settings.tool_provider,
        )

        yield

        await pipeline.aclose()
        shutdown_telemetry()
        logger.info("shutdown_complete")

    app = FastAPI(
        title="TraceGuard",
        version=__version__,
        description="Failure-aware LLM request pipeline with stage tracing and remediation",
        lifespan=lifespan,
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(ask_router, tags=["ask"])
    return app
