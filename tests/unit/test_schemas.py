"""Tests for Pydantic schemas."""

import pytest
from pydantic import ValidationError

from traceguard.models.schemas import (
    AskBody,
    AskRequest,
    ChaosFlags,
    ErrorResponse,
    HealthResponse,
    StageSummary,
)


def test_ask_request_defaults():
    req = AskRequest(input_text="What is tracing?")
    assert req.tenant_id == "default"
    assert req.request_id
    assert req.chaos == ChaosFlags()
    assert not req.chaos.break_tool


def test_ask_request_ids_are_unique():
    assert AskRequest(input_text="a").request_id != AskRequest(input_text="a").request_id


def test_ask_request_rejects_empty_input():
    with pytest.raises(ValidationError):
        AskRequest(input_text="")


def test_ask_request_rejects_oversized_input():
    with pytest.raises(ValidationError):
        AskRequest(input_text="x" * 4001)


def test_ask_request_is_frozen():
    req = AskRequest(input_text="hello")
    with pytest.raises(ValidationError):
        req.tenant_id = "other"


def test_ask_body_optional_fields():
    body = AskBody(input="hello")
    assert body.tenant is None
    assert body.request_id is None


def test_stage_summary_rejects_unknown_status():
    with pytest.raises(ValidationError):
        StageSummary(stage="tool", status="FAILED", latency_ms=1.0)


def test_error_response_serialization():
    resp = ErrorResponse(
        request_id="r1",
        stage="generation",
        error_type="LLM_ERROR",
        error_code="LLM_PROVIDER_DOWN",
        message="upstream 503",
    )
    data = resp.model_dump()
    assert data["error_code"] == "LLM_PROVIDER_DOWN"


def test_health_response():
    resp = HealthResponse(
        status="ok",
        service="traceguard-api",
        environment="test",
        retrieval_provider="memory",
        llm_provider="mock",
    )
    assert resp.status == "ok"
