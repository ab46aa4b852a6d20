"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Stage(str, Enum):
    RETRIEVAL = "retrieval"
    TOOL = "tool"
    GENERATION = "generation"
    EVALUATION = "evaluation"
    REMEDIATION = "remediation"


# Pipeline order; also the order used to pick the dominant error.
STAGE_ORDER: tuple[Stage, ...] = (
    Stage.RETRIEVAL,
    Stage.TOOL,
    Stage.GENERATION,
    Stage.EVALUATION,
    Stage.REMEDIATION,
)


class StageStatus(str, Enum):
    OK = "OK"
    DEGRADED = "DEGRADED"
    ERROR = "ERROR"


class ErrorType(str, Enum):
    RETRIEVAL_ERROR = "RETRIEVAL_ERROR"
    TOOL_ERROR = "TOOL_ERROR"
    LLM_ERROR = "LLM_ERROR"
    EVALUATION_ERROR = "EVALUATION_ERROR"
    REMEDIATION_ERROR = "REMEDIATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class ErrorCode(str, Enum):
    RETRIEVAL_EMPTY_RESULT = "RETRIEVAL_EMPTY_RESULT"
    RETRIEVAL_PROVIDER_DOWN = "RETRIEVAL_PROVIDER_DOWN"
    RETRIEVAL_TIMEOUT = "RETRIEVAL_TIMEOUT"
    TOOL_TIMEOUT = "TOOL_TIMEOUT"
    TOOL_BAD_RESPONSE = "TOOL_BAD_RESPONSE"
    TOOL_UNAVAILABLE = "TOOL_UNAVAILABLE"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LARGE = "LLM_CONTEXT_TOO_LARGE"
    LLM_PROVIDER_DOWN = "LLM_PROVIDER_DOWN"
    EVAL_MODEL_FAILURE = "EVAL_MODEL_FAILURE"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    REMEDIATION_FALLBACK_FAILED = "REMEDIATION_FALLBACK_FAILED"
    UNKNOWN = "UNKNOWN"


class RemediationActionType(str, Enum):
    CLARIFICATION = "CLARIFICATION"
    SAFE_MODE = "SAFE_MODE"
    FALLBACK_TOOL = "FALLBACK_TOOL"
    RETRY_LLM = "RETRY_LLM"


class FinalMode(str, Enum):
    NORMAL = "NORMAL"
    SAFE = "SAFE"
    DEGRADED = "DEGRADED"


@dataclass(frozen=True)
class ErrorClassification:
    type: ErrorType
    code: ErrorCode
    message: str


@dataclass(frozen=True)
class StageOutcome:
    stage: Stage
    status: StageStatus
    latency_ms: float
    error: ErrorClassification | None = None


@dataclass(frozen=True)
class EvalScores:
    faithfulness: float
    relevance: float
    policy_risk: float
    hallucination: float
    overall: float
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RemediationAction:
    type: RemediationActionType
    reason: str


@dataclass(frozen=True)
class RemediationReport:
    triggered: bool
    actions: list[RemediationAction]
    final_mode: FinalMode

    @property
    def primary_action(self) -> RemediationAction | None:
        return self.actions[0] if self.actions else None


@dataclass(frozen=True)
class RetrievalOutput:
    context: str
    docs: int
    sources: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GenerationOutput:
    text: str
    input_tokens: int
    output_tokens: int
    cost_usd: float

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ToolOutput:
    result: str
