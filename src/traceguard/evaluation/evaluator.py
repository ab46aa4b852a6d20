"""Deterministic answer evaluator: faithfulness, relevance, policy risk, hallucination.

No network calls and no randomness. The same (query, context, answer) always
produces the same scores, which keeps tests and demos reproducible.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from traceguard.config.constants import POLICY_RISK_PATTERNS
from traceguard.config.settings import Settings
from traceguard.models.domain import EvalScores

NO_CONTEXT_FAITHFULNESS = 0.5
NO_CONTEXT_HALLUCINATION = 0.3
CONTEXT_PHRASE_BOOST = 0.2
QUERY_RESTATEMENT_BOOST = 0.3
CONTEXT_PHRASE_PREFIX = 20
QUERY_PREFIX = 10


@dataclass(frozen=True)
class EvalWeights:
    faithfulness: float = 0.3
    relevance: float = 0.3
    policy_risk: float = 0.2
    hallucination: float = 0.2

    @classmethod
    def from_settings(cls, settings: Settings) -> EvalWeights:
        return cls(
            faithfulness=settings.eval_w_faithfulness,
            relevance=settings.eval_w_relevance,
            policy_risk=settings.eval_w_policy_risk,
            hallucination=settings.eval_w_hallucination,
        )


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def tokenize(text: str) -> set[str]:
    """Lowercase whitespace-separated words longer than two characters.

    Punctuation stays attached, so "observability?" and "observability" are
    different tokens.
    """
    return {t for t in text.lower().split() if len(t) > 2}


def jaccard(text_a: str, text_b: str) -> float:
    if not text_a or not text_b:
        return 0.0
    a, b = tokenize(text_a), tokenize(text_b)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def policy_matches(answer: str) -> list[str]:
    return [name for name, pattern in POLICY_RISK_PATTERNS.items() if pattern.search(answer)]


class DeterministicEvaluator:
    def __init__(self, weights: EvalWeights | None = None) -> None:
        self.weights = weights or EvalWeights()

    def evaluate(self, query: str, context: str, answer: str) -> EvalScores:
        reasons: list[str] = []
        has_context = bool(context and context.strip())
        answer_lower = answer.lower()

        if has_context:
            faithfulness = jaccard(answer, context)
            if self._echoes_context(answer_lower, context):
                faithfulness = min(faithfulness + CONTEXT_PHRASE_BOOST, 1.0)
                reasons.append("Answer restates retrieved context")
            hallucination = 1.0 - faithfulness
        else:
            faithfulness = NO_CONTEXT_FAITHFULNESS
            hallucination = NO_CONTEXT_HALLUCINATION
            reasons.append("No retrieved context; faithfulness unverifiable")

        relevance = jaccard(answer, query)
        query_prefix = query.lower()[:QUERY_PREFIX]
        if query_prefix.strip() and query_prefix in answer_lower:
            relevance = min(relevance + QUERY_RESTATEMENT_BOOST, 1.0)
            reasons.append("Answer directly addresses the query")

        matched = policy_matches(answer)
        policy_risk = min(len(matched) / 3, 1.0)
        if matched:
            reasons.append(f"Matched policy patterns: {', '.join(matched)}")

        faithfulness = clamp01(faithfulness)
        relevance = clamp01(relevance)
        policy_risk = clamp01(policy_risk)
        hallucination = clamp01(hallucination)

        w = self.weights
        overall = clamp01(
            w.faithfulness * faithfulness
            + w.relevance * relevance
            + w.policy_risk * (1.0 - policy_risk)
            + w.hallucination * (1.0 - hallucination)
        )

        return EvalScores(
            faithfulness=faithfulness,
            relevance=relevance,
            policy_risk=policy_risk,
            hallucination=hallucination,
            overall=overall,
            reasons=reasons,
        )

    @staticmethod
    def _echoes_context(answer_lower: str, context: str) -> bool:
        sentences = re.split(r"[.!?]\s+", context)[:3]
        for sentence in sentences:
            prefix = sentence.strip().lower()[:CONTEXT_PHRASE_PREFIX]
            if prefix and prefix in answer_lower:
                return True
        return False


_default_evaluator = DeterministicEvaluator()


def evaluate(query: str, context: str, answer: str) -> EvalScores:
    """Score an answer with the default weights."""
    return _default_evaluator.evaluate(query, context, answer)
