"""Custom exception hierarchy for TraceGuard."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from traceguard.models.domain import ErrorClassification, Stage


class TraceGuardError(Exception):
    """Base exception for all TraceGuard errors."""


class StageFailure(TraceGuardError):
    """A collaborator failed while a pipeline stage was running.

    ``code`` and ``status`` are optional hints read by the error classifier:
    ``code`` is a short symbolic tag such as ``TOOL_TIMEOUT`` and ``status`` an
    upstream HTTP status.
    """

    def __init__(
        self, message: str = "", code: str | None = None, status: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class RetrievalError(StageFailure):
    """Error during context retrieval."""


class ToolError(StageFailure):
    """Error during tool invocation."""


class GenerationError(StageFailure):
    """Error during answer generation."""


class EvaluationError(StageFailure):
    """Error during answer evaluation."""


class RemediationError(StageFailure):
    """Error while computing the remediation report."""


class ConfigurationError(TraceGuardError):
    """Error in system configuration."""


class MissingStageAttributesError(TraceGuardError):
    """A stage span was started without its required attributes."""

    def __init__(self, stage: str, missing: list[str]) -> None:
        super().__init__(
            f"Missing required attributes for stage '{stage}': {', '.join(missing)}"
        )
        self.stage = stage
        self.missing = missing


class PipelineAbortedError(TraceGuardError):
    """A fatal stage failed and no answer could be produced."""

    def __init__(self, stage: Stage, classification: ErrorClassification) -> None:
        super().__init__(classification.message)
        self.stage = stage
        self.classification = classification
