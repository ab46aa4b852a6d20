"""Remediation policy: decide whether to override an answer, and how."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from traceguard.config.constants import (
    CLARIFICATION_TEMPLATE,
    DEGRADED_TOOL_NOTICE,
    SAFE_MODE_MESSAGE,
)
from traceguard.config.settings import Settings
from traceguard.models.domain import (
    EvalScores,
    FinalMode,
    RemediationAction,
    RemediationActionType,
    RemediationReport,
)

NO_REMEDIATION = RemediationReport(triggered=False, actions=[], final_mode=FinalMode.NORMAL)


@dataclass(frozen=True)
class RemediationThresholds:
    policy_risk: float = 0.7
    trigger: Literal["overall", "faithfulness"] = "overall"
    quality: float = 0.75
    faithfulness: float = 0.8

    @classmethod
    def from_settings(cls, settings: Settings) -> RemediationThresholds:
        return cls(
            policy_risk=settings.policy_risk_threshold,
            trigger=settings.remediation_trigger,
            quality=settings.quality_threshold,
            faithfulness=settings.faithfulness_threshold,
        )


def remediate(
    scores: EvalScores,
    tool_failed: bool,
    thresholds: RemediationThresholds | None = None,
) -> RemediationReport:
    """First matching rule wins; at most one action is produced."""
    t = thresholds or RemediationThresholds()

    if scores.policy_risk > t.policy_risk:
        return _single(
            RemediationActionType.SAFE_MODE,
            f"Policy risk {scores.policy_risk:.2f} exceeds {t.policy_risk:.2f}",
            FinalMode.SAFE,
        )

    if tool_failed:
        return _single(
            RemediationActionType.FALLBACK_TOOL,
            "Tool invocation failed; serving fallback response",
            FinalMode.DEGRADED,
        )

    if t.trigger == "faithfulness":
        if scores.faithfulness < t.faithfulness:
            return _single(
                RemediationActionType.CLARIFICATION,
                f"Faithfulness {scores.faithfulness:.2f} below {t.faithfulness:.2f}",
                FinalMode.DEGRADED,
            )
    elif scores.overall < t.quality:
        return _single(
            RemediationActionType.CLARIFICATION,
            f"Overall quality {scores.overall:.2f} below {t.quality:.2f}",
            FinalMode.DEGRADED,
        )

    return NO_REMEDIATION


def apply_remediation(answer: str, report: RemediationReport, query: str) -> str:
    """Transform the generated answer according to the remediation outcome."""
    action = report.primary_action
    if report.final_mode == FinalMode.SAFE:
        return SAFE_MODE_MESSAGE
    if action is None:
        return answer
    if action.type == RemediationActionType.FALLBACK_TOOL:
        return f"{answer}\n\n{DEGRADED_TOOL_NOTICE}"
    if action.type == RemediationActionType.CLARIFICATION:
        return CLARIFICATION_TEMPLATE.format(query=query)
    return answer


def _single(
    action_type: RemediationActionType, reason: str, mode: FinalMode
) -> RemediationReport:
    return RemediationReport(
        triggered=True,
        actions=[RemediationAction(type=action_type, reason=reason)],
        final_mode=mode,
    )
