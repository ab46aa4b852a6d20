"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ChaosFlags(BaseModel):
    """Failure-injection switches used for demos and monitoring drills."""

    model_config = ConfigDict(frozen=True)

    break_tool: bool = False
    bad_retrieval: bool = False
    policy_risk: bool = False
    token_spike: bool = False


class AskRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    request_id: str = Field(default_factory=lambda: str(uuid4()))
    tenant_id: str = "default"
    input_text: str = Field(min_length=1, max_length=4000)
    chaos: ChaosFlags = Field(default_factory=ChaosFlags)


class AskBody(BaseModel):
    """Body of ``POST /v1/ask``."""

    input: str = Field(min_length=1, max_length=4000)
    tenant: str | None = None
    request_id: str | None = None


class Usage(BaseModel):
    tokens_in: int
    tokens_out: int
    total_tokens: int
    cost_usd: float


class EvalScoresOut(BaseModel):
    faithfulness: float
    relevance: float
    policy_risk: float
    hallucination: float
    overall: float
    reasons: list[str] = Field(default_factory=list)


class RemediationActionOut(BaseModel):
    type: Literal["CLARIFICATION", "SAFE_MODE", "FALLBACK_TOOL", "RETRY_LLM"]
    reason: str


class RemediationReportOut(BaseModel):
    triggered: bool
    actions: list[RemediationActionOut]
    final_mode: Literal["NORMAL", "SAFE", "DEGRADED"]


class Artifacts(BaseModel):
    sources: list[str] = Field(default_factory=list)
    tool_results: list[str] = Field(default_factory=list)


class StageSummary(BaseModel):
    stage: str
    status: Literal["OK", "DEGRADED", "ERROR"]
    latency_ms: float
    error_code: str | None = None


class DebugInfo(BaseModel):
    trace_id: str | None = None
    span_id: str | None = None
    latency_ms: float
    stages: list[StageSummary] = Field(default_factory=list)


class AskResponse(BaseModel):
    request_id: str
    tenant_id: str
    status: Literal["OK", "DEGRADED", "ERROR"]
    answer: str
    usage: Usage
    eval: EvalScoresOut
    remediation: RemediationReportOut
    artifacts: Artifacts = Field(default_factory=Artifacts)
    debug: DebugInfo


class ErrorResponse(BaseModel):
    request_id: str
    stage: str
    error_type: str
    error_code: str
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    retrieval_provider: str
    llm_provider: str
