"""Shared test fixtures."""

from __future__ import annotations

import pytest
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import CollectorRegistry

from traceguard.config.settings import Settings
from traceguard.models.domain import GenerationOutput, RetrievalOutput, ToolOutput
from traceguard.observability.metrics import MetricsRegistry
from traceguard.observability.tracing import StageTracer
from traceguard.pipeline.orchestrator import AskPipeline

OBSERVABILITY_QUERY = "What is observability?"
OBSERVABILITY_CONTEXT = "Observability is the ability to understand system state from telemetry."


class SpanCounter(SpanProcessor):
    """Counts span starts and ends so tests can assert every opened span was closed."""

    def __init__(self) -> None:
        self.started = 0
        self.ended = 0

    def on_start(self, span, parent_context=None) -> None:
        self.started += 1

    def on_end(self, span) -> None:
        self.ended += 1

    @property
    def open(self) -> int:
        return self.started - self.ended


class FakeRetriever:
    def __init__(self, context: str = OBSERVABILITY_CONTEXT, docs: int = 1, error=None) -> None:
        self.context = context
        self.docs = docs
        self.error = error
        self.calls = 0

    @property
    def provider(self) -> str:
        return "fake"

    async def retrieve(self, query: str, top_k: int = 3) -> RetrievalOutput:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return RetrievalOutput(
            context=self.context, docs=self.docs, sources=["doc-1"] if self.docs else []
        )


class FakeTool:
    def __init__(self, result: str = "tool-ok", error=None) -> None:
        self.result = result
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake.tool"

    @property
    def timeout_ms(self) -> int:
        return 500

    async def invoke(self) -> ToolOutput:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ToolOutput(result=self.result)


class FakeGenerator:
    """Answers with the question followed by the observability context."""

    def __init__(self, text: str | None = None, error=None) -> None:
        self.text = text
        self.error = error
        self.prompts: list[str] = []

    @property
    def provider(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"

    async def generate(self, prompt: str) -> GenerationOutput:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        text = self.text if self.text is not None else f"{OBSERVABILITY_QUERY} {OBSERVABILITY_CONTEXT}"
        return GenerationOutput(text=text, input_tokens=120, output_tokens=30, cost_usd=0.00015)


class FailingEvaluator:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def evaluate(self, query: str, context: str, answer: str):
        raise self.error


@pytest.fixture
def settings():
    """Test settings isolated from any local .env file."""
    return Settings(_env_file=None, environment="test", log_json=False)


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def span_counter():
    return SpanCounter()


@pytest.fixture
def tracer_provider(span_exporter, span_counter):
    provider = TracerProvider()
    provider.add_span_processor(span_counter)
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def stage_tracer(tracer_provider):
    return StageTracer(
        service_name="traceguard-test",
        environment="test",
        tracer=tracer_provider.get_tracer("traceguard.test"),
    )


@pytest.fixture
def metrics():
    return MetricsRegistry(CollectorRegistry())


@pytest.fixture
def make_pipeline(settings, stage_tracer, metrics):
    """Build a pipeline over fakes; any collaborator or setting can be overridden."""

    def _make(retriever=None, tool=None, generator=None, evaluator=None, **overrides):
        pipeline_settings = settings.model_copy(update=overrides) if overrides else settings
        return AskPipeline(
            retriever=retriever or FakeRetriever(),
            generator=generator or FakeGenerator(),
            tool=tool or FakeTool(),
            tracer=stage_tracer,
            metrics=metrics,
            settings=pipeline_settings,
            evaluator=evaluator,
        )

    return _make


def spans_by_name(exporter: InMemorySpanExporter) -> dict:
    return {span.name: span for span in exporter.get_finished_spans()}
