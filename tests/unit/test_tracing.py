"""Tests for the stage span contract."""

from typing import get_args

import pytest
from opentelemetry.trace import StatusCode

from traceguard.errors.taxonomy import ErrorHints, classify
from traceguard.exceptions import MissingStageAttributesError, ToolError
from traceguard.models.domain import ErrorCode, ErrorType, Stage, StageStatus
from traceguard.models.schemas import AskRequest
from traceguard.observability.span_attrs import (
    GenerationAttrs,
    RetrievalAttrs,
    ToolAttrs,
    ToolResult,
    span_name,
)
from traceguard.observability.tracing import StageTracer


@pytest.fixture
def request_():
    return AskRequest(request_id="req-1", tenant_id="tenant-a", input_text="What is tracing?")


def _retrieval_attrs(**overrides):
    values = {"provider": "memory", "top_k": 3, "docs_count": 0, "query_length": 16}
    values.update(overrides)
    return RetrievalAttrs(**values)


def test_span_names():
    assert span_name(Stage.RETRIEVAL) == "core.retrieval"
    assert span_name(Stage.REMEDIATION) == "core.remediation"


def test_tool_result_values():
    assert get_args(ToolResult) == ("SUCCESS", "FAILURE", "FALLBACK")


@pytest.mark.asyncio
async def test_successful_stage_closes_span_with_attributes(
    stage_tracer, request_, span_exporter, span_counter
):
    async def work(scope):
        scope.update_attrs(docs_count=2)
        return "context"

    result = await stage_tracer.run_stage(request_, _retrieval_attrs(), work)

    assert result.value == "context"
    assert not result.failed
    assert result.outcome.status == StageStatus.OK
    assert result.outcome.latency_ms >= 0
    assert span_counter.open == 0

    (span,) = span_exporter.get_finished_spans()
    assert span.name == "core.retrieval"
    attrs = span.attributes
    assert attrs["request_id"] == "req-1"
    assert attrs["tenant_id"] == "tenant-a"
    assert attrs["stage"] == "retrieval"
    assert attrs["status"] == "OK"
    assert attrs["service.name"] == "traceguard-test"
    assert attrs["deployment.environment"] == "test"
    assert attrs["retrieval.provider"] == "memory"
    assert attrs["retrieval.docs.count"] == 2
    assert "latency_ms" in attrs
    assert "error.code" not in attrs


@pytest.mark.asyncio
async def test_failing_stage_is_classified_and_closed(
    stage_tracer, request_, span_exporter, span_counter
):
    attrs = ToolAttrs(name="mock.weather", attempt=1, timeout_ms=2000, result="SUCCESS")

    async def work(scope):
        raise ToolError("Tool timeout", code="TOOL_TIMEOUT")

    result = await stage_tracer.run_stage(request_, attrs, work)

    assert result.failed
    assert result.value is None
    assert result.error.type == ErrorType.TIMEOUT
    assert result.error.code == ErrorCode.TOOL_TIMEOUT
    assert span_counter.open == 0

    (span,) = span_exporter.get_finished_spans()
    assert span.status.status_code == StatusCode.ERROR
    assert span.attributes["status"] == "ERROR"
    assert span.attributes["error.type"] == "TIMEOUT"
    assert span.attributes["error.code"] == "TOOL_TIMEOUT"
    assert span.attributes["error.message"] == "Tool timeout"
    assert any(event.name == "exception" for event in span.events)


@pytest.mark.asyncio
async def test_sync_work_is_supported(stage_tracer, request_):
    result = await stage_tracer.run_stage(request_, _retrieval_attrs(), lambda scope: 42)
    assert result.value == 42


@pytest.mark.asyncio
async def test_degraded_stage_keeps_value(stage_tracer, request_, span_exporter):
    def work(scope):
        scope.mark_degraded(classify(Stage.RETRIEVAL, None, ErrorHints(empty_result=True)))
        return "empty"

    result = await stage_tracer.run_stage(request_, _retrieval_attrs(), work)

    assert not result.failed
    assert result.value == "empty"
    assert result.outcome.status == StageStatus.DEGRADED
    assert result.error.code == ErrorCode.RETRIEVAL_EMPTY_RESULT
    (span,) = span_exporter.get_finished_spans()
    assert span.attributes["status"] == "DEGRADED"
    assert span.status.status_code != StatusCode.ERROR


@pytest.mark.asyncio
async def test_missing_attributes_rejected_outside_production(
    stage_tracer, request_, span_counter
):
    attrs = GenerationAttrs(
        provider="mock",
        model=None,
        tokens_input=0,
        tokens_output=0,
        tokens_total=0,
        cost_usd=None,
    )
    with pytest.raises(MissingStageAttributesError) as exc_info:
        await stage_tracer.run_stage(request_, attrs, lambda scope: None)

    assert exc_info.value.missing == ["generation.model", "generation.cost.usd"]
    assert "generation" in str(exc_info.value)
    assert span_counter.started == 0


@pytest.mark.asyncio
async def test_missing_attributes_tolerated_in_production(
    tracer_provider, request_, span_exporter, span_counter
):
    tracer = StageTracer(
        service_name="traceguard-test",
        environment="production",
        validate_attrs=False,
        tracer=tracer_provider.get_tracer("traceguard.test"),
    )
    result = await tracer.run_stage(request_, _retrieval_attrs(provider=None), lambda scope: "ok")

    assert result.value == "ok"
    assert span_counter.open == 0
    (span,) = span_exporter.get_finished_spans()
    assert "retrieval.provider" not in span.attributes


def test_from_settings_validates_only_outside_production(settings):
    assert StageTracer.from_settings(settings)._validate_attrs
    prod = settings.model_copy(update={"environment": "production"})
    assert not StageTracer.from_settings(prod)._validate_attrs


@pytest.mark.asyncio
async def test_stage_spans_nest_under_request_span(stage_tracer, request_, span_exporter):
    with stage_tracer.request_span(request_) as root:
        await stage_tracer.run_stage(request_, _retrieval_attrs(), lambda scope: None)
        root.finish(StageStatus.OK, None)
        trace_id = root.trace_id

    spans = {span.name: span for span in span_exporter.get_finished_spans()}
    stage, request_span = spans["core.retrieval"], spans["core.request"]
    assert stage.parent.span_id == request_span.context.span_id
    assert format(request_span.context.trace_id, "032x") == trace_id
    assert request_span.attributes["stage"] == "request"
    assert request_span.attributes["status"] == "OK"
