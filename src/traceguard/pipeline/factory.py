"""Build pipeline collaborators from settings."""

from __future__ import annotations

from traceguard.config.settings import Settings
from traceguard.generation.gemini_provider import GeminiProvider
from traceguard.generation.mock_provider import MockGenerator
from traceguard.observability.metrics import MetricsRegistry, get_metrics
from traceguard.observability.tracing import StageTracer
from traceguard.pipeline.orchestrator import AskPipeline
from traceguard.protocols.llm import Generator
from traceguard.protocols.retriever import Retriever
from traceguard.protocols.tool import Tool
from traceguard.retrieval.memory_retriever import InMemoryRetriever
from traceguard.retrieval.qdrant_retriever import QdrantRetriever
from traceguard.tools.http_tool import HttpTool
from traceguard.tools.static_tool import StaticTool


def build_retriever(settings: Settings) -> Retriever:
    if settings.retrieval_provider == "qdrant":
        return QdrantRetriever(
            base_url=settings.qdrant_url,
            collection=settings.qdrant_collection,
            scroll_limit=settings.qdrant_scroll_limit,
            timeout_s=settings.qdrant_timeout_s,
        )
    return InMemoryRetriever()


def build_generator(settings: Settings) -> Generator:
    if settings.llm_provider == "gemini":
        return GeminiProvider(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
            temperature=settings.gemini_temperature,
            max_tokens=settings.gemini_max_tokens,
        )
    return MockGenerator()


def build_tool(settings: Settings) -> Tool:
    if settings.tool_provider == "http":
        return HttpTool(
            name=settings.tool_name,
            url=settings.tool_url,
            timeout_ms=settings.tool_timeout_ms,
        )
    return StaticTool(name=settings.tool_name, timeout_ms=settings.tool_timeout_ms)


def build_pipeline(
    settings: Settings,
    metrics: MetricsRegistry | None = None,
    tracer: StageTracer | None = None,
) -> AskPipeline:
    return AskPipeline(
        retriever=build_retriever(settings),
        generator=build_generator(settings),
        tool=build_tool(settings),
        tracer=tracer or StageTracer.from_settings(settings),
        metrics=metrics or get_metrics(),
        settings=settings,
    )
