"""Static constants shared across modules."""

from __future__ import annotations

import re

STOPWORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
        "have", "in", "is", "it", "its", "of", "on", "or", "that", "the", "this",
        "to", "was", "were", "will", "with", "what", "which", "who", "how", "why",
    }
)

# Answer-side policy patterns; each match adds 1/3 to the policy risk score.
POLICY_RISK_PATTERNS: dict[str, re.Pattern[str]] = {
    "ssn": re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    "credit_card": re.compile(r"\b\d{4}\s?\d{4}\s?\d{4}\s?\d{4}\b"),
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    "credential_assignment": re.compile(
        r"\b(password|secret|key|token)\s*[:=]\s*\w+", re.IGNORECASE
    ),
    "destructive_action": re.compile(
        r"\b(delete|remove|drop)\s+(all|everything|data|database)", re.IGNORECASE
    ),
    "abuse_phrase": re.compile(r"\b(hack|exploit|bypass|circumvent)", re.IGNORECASE),
}

SAFE_MODE_MESSAGE = (
    "Safe mode: I can't help with that request. "
    "Please rephrase or provide a safer alternative."
)

DEGRADED_TOOL_NOTICE = "(Note: tool degraded; returned fallback response.)"

CLARIFICATION_TEMPLATE = (
    'I might be missing context. Can you clarify what exactly you mean by: "{query}"?'
)
