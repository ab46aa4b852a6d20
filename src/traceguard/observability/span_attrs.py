"""Span naming and the closed per-stage attribute sets.

Every stage span carries the mandatory identity/outcome attributes plus the
attributes of exactly one of the dataclasses below. Attribute keys are part
of the dashboard contract and must not drift.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar, Literal, Union

from traceguard.models.domain import Stage

SPAN_PREFIX = "core"
REQUEST_SPAN = f"{SPAN_PREFIX}.request"
REQUEST_STAGE = "request"

# Mandatory attribute keys
ATTR_REQUEST_ID = "request_id"
ATTR_TENANT_ID = "tenant_id"
ATTR_STAGE = "stage"
ATTR_STATUS = "status"
ATTR_SERVICE_NAME = "service.name"
ATTR_DEPLOYMENT_ENV = "deployment.environment"

# Error attribute keys
ATTR_ERROR_TYPE = "error.type"
ATTR_ERROR_CODE = "error.code"
ATTR_ERROR_MESSAGE = "error.message"

# FALLBACK is reserved for a tool retried against a fallback backend; the tool
# stage itself only reports SUCCESS or FAILURE.
ToolResult = Literal["SUCCESS", "FAILURE", "FALLBACK"]
RemediationActionName = Literal["SAFE_MODE", "FALLBACK_TOOL", "CLARIFICATION", "RETRY_LLM", "NONE"]


def span_name(stage: Stage) -> str:
    return f"{SPAN_PREFIX}.{stage.value}"


@dataclass(frozen=True)
class _StageAttrs:
    stage: ClassVar[Stage]
    # dataclass field name -> span attribute key
    keys: ClassVar[dict[str, str]]

    def missing(self) -> list[str]:
        return [key for name, key in self.keys.items() if getattr(self, name) is None]

    def span_attributes(self) -> dict[str, str | bool | int | float]:
        attrs = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                attrs[self.keys[f.name]] = value
        return attrs


@dataclass(frozen=True)
class RetrievalAttrs(_StageAttrs):
    stage: ClassVar[Stage] = Stage.RETRIEVAL
    keys: ClassVar[dict[str, str]] = {
        "provider": "retrieval.provider",
        "top_k": "retrieval.top_k",
        "docs_count": "retrieval.docs.count",
        "query_length": "retrieval.query.length",
    }

    provider: str | None
    top_k: int | None
    docs_count: int | None
    query_length: int | None


@dataclass(frozen=True)
class ToolAttrs(_StageAttrs):
    stage: ClassVar[Stage] = Stage.TOOL
    keys: ClassVar[dict[str, str]] = {
        "name": "tool.name",
        "attempt": "tool.attempt",
        "timeout_ms": "tool.timeout_ms",
        "result": "tool.result",
    }

    name: str | None
    attempt: int | None
    timeout_ms: int | None
    result: ToolResult | None


@dataclass(frozen=True)
class GenerationAttrs(_StageAttrs):
    stage: ClassVar[Stage] = Stage.GENERATION
    keys: ClassVar[dict[str, str]] = {
        "provider": "generation.provider",
        "model": "generation.model",
        "tokens_input": "generation.tokens.input",
        "tokens_output": "generation.tokens.output",
        "tokens_total": "generation.tokens.total",
        "cost_usd": "generation.cost.usd",
    }

    provider: str | None
    model: str | None
    tokens_input: int | None
    tokens_output: int | None
    tokens_total: int | None
    cost_usd: float | None


@dataclass(frozen=True)
class EvaluationAttrs(_StageAttrs):
    stage: ClassVar[Stage] = Stage.EVALUATION
    keys: ClassVar[dict[str, str]] = {
        "faithfulness": "evaluation.faithfulness",
        "relevance": "evaluation.relevance",
        "policy_risk": "evaluation.policy_risk",
        "hallucination": "evaluation.hallucination",
        "overall": "evaluation.overall",
    }

    faithfulness: float | None
    relevance: float | None
    policy_risk: float | None
    hallucination: float | None
    overall: float | None


@dataclass(frozen=True)
class RemediationAttrs(_StageAttrs):
    stage: ClassVar[Stage] = Stage.REMEDIATION
    keys: ClassVar[dict[str, str]] = {
        "triggered": "remediation.triggered",
        "action": "remediation.action",
        "reason": "remediation.reason",
    }

    triggered: bool | None
    action: RemediationActionName | None
    reason: str | None


StageAttrs = Union[RetrievalAttrs, ToolAttrs, GenerationAttrs, EvaluationAttrs, RemediationAttrs]
