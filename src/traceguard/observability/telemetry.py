"""OpenTelemetry tracer provider bootstrap."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from traceguard import __version__
from traceguard.config.settings import Settings
from traceguard.observability.logger import get_logger

logger = get_logger("telemetry")

_provider: TracerProvider | None = None


def init_telemetry(settings: Settings) -> TracerProvider:
    """Install the global tracer provider once; later calls return the same provider.

    OpenTelemetry accepts a single global provider per process, so an SDK
    provider that is already installed is adopted instead of replaced.
    """
    global _provider
    if _provider is not None:
        return _provider

    current = trace.get_tracer_provider()
    if isinstance(current, TracerProvider):
        _provider = current
        logger.info("telemetry_reused", service=settings.service_name)
        return current

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": __version__,
            "deployment.environment": settings.environment,
        }
    )
    provider = TracerProvider(resource=resource)
    if settings.otel_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(
        "telemetry_initialized",
        service=settings.service_name,
        environment=settings.environment,
        console_export=settings.otel_console_export,
    )
    return provider


def shutdown_telemetry() -> None:
    """Flush pending spans; the provider stays installed for the next app start."""
    if _provider is not None:
        _provider.force_flush()
