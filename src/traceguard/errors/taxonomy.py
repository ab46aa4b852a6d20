"""Error taxonomy: map a stage failure onto a bounded (type, code, message) triple.

The taxonomy is closed. Whatever a collaborator raises, the classifier only
ever produces members of ``ErrorType`` and ``ErrorCode``, so dashboards and
alerts can group on them without cardinality blow-ups.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from traceguard.models.domain import ErrorClassification, ErrorCode, ErrorType, Stage

UNKNOWN_MESSAGE = "Unknown error"

_TIMEOUT_CODES = {"TIMEOUT", "TOOL_TIMEOUT", "RETRIEVAL_TIMEOUT"}
_PROVIDER_DOWN_STATUSES = {500, 502, 503, 504}
_RATE_LIMIT_MARKERS = ("rate limit", "rate-limit", "quota", "resource_exhausted")


@dataclass(frozen=True)
class ErrorHints:
    timeout: bool = False
    provider_down: bool = False
    rate_limit: bool = False
    empty_result: bool = False


def classify(
    stage: Stage | str,
    raw_error: object = None,
    hints: ErrorHints | None = None,
) -> ErrorClassification:
    """Classify a failure. Never raises; identical inputs give identical output."""
    hints = hints or ErrorHints()
    message = error_message(raw_error)
    stage_name = stage.value if isinstance(stage, Stage) else str(stage)

    if stage_name == Stage.RETRIEVAL.value:
        if hints.timeout:
            return ErrorClassification(ErrorType.TIMEOUT, ErrorCode.RETRIEVAL_TIMEOUT, message)
        if hints.provider_down:
            return ErrorClassification(
                ErrorType.RETRIEVAL_ERROR, ErrorCode.RETRIEVAL_PROVIDER_DOWN, message
            )
        if hints.empty_result:
            return ErrorClassification(
                ErrorType.RETRIEVAL_ERROR, ErrorCode.RETRIEVAL_EMPTY_RESULT, message
            )
        return ErrorClassification(
            ErrorType.RETRIEVAL_ERROR, ErrorCode.RETRIEVAL_PROVIDER_DOWN, message
        )

    if stage_name == Stage.TOOL.value:
        if hints.timeout or _symbolic_code(raw_error) in _TIMEOUT_CODES:
            return ErrorClassification(ErrorType.TIMEOUT, ErrorCode.TOOL_TIMEOUT, message)
        if hints.provider_down:
            return ErrorClassification(ErrorType.TOOL_ERROR, ErrorCode.TOOL_UNAVAILABLE, message)
        return ErrorClassification(ErrorType.TOOL_ERROR, ErrorCode.TOOL_BAD_RESPONSE, message)

    if stage_name == Stage.GENERATION.value:
        if hints.rate_limit:
            return ErrorClassification(ErrorType.RATE_LIMIT, ErrorCode.LLM_RATE_LIMIT, message)
        if hints.provider_down:
            return ErrorClassification(ErrorType.LLM_ERROR, ErrorCode.LLM_PROVIDER_DOWN, message)
        return ErrorClassification(ErrorType.LLM_ERROR, ErrorCode.LLM_CONTEXT_TOO_LARGE, message)

    if stage_name == Stage.EVALUATION.value:
        return ErrorClassification(
            ErrorType.EVALUATION_ERROR, ErrorCode.EVAL_MODEL_FAILURE, message
        )

    if stage_name == Stage.REMEDIATION.value:
        return ErrorClassification(
            ErrorType.REMEDIATION_ERROR, ErrorCode.REMEDIATION_FALLBACK_FAILED, message
        )

    return ErrorClassification(ErrorType.UNKNOWN, ErrorCode.UNKNOWN, message)


def hints_from_exception(exc: BaseException) -> ErrorHints:
    """Derive classifier hints from an exception raised by a collaborator."""
    status = http_status(exc)
    message = error_message(exc).lower()
    timeout = (
        isinstance(exc, (TimeoutError, httpx.TimeoutException))
        or _symbolic_code(exc) in _TIMEOUT_CODES
    )
    rate_limit = status == 429 or any(m in message for m in _RATE_LIMIT_MARKERS)
    provider_down = (
        isinstance(exc, (ConnectionError, httpx.ConnectError, httpx.RemoteProtocolError))
        or status in _PROVIDER_DOWN_STATUSES
    )
    return ErrorHints(timeout=timeout, provider_down=provider_down, rate_limit=rate_limit)


def error_message(raw_error: object) -> str:
    if raw_error is None:
        return UNKNOWN_MESSAGE
    message = getattr(raw_error, "message", None)
    if not isinstance(message, str) or not message.strip():
        try:
            message = str(raw_error)
        except Exception:
            message = ""
    return message if message.strip() else UNKNOWN_MESSAGE


def http_status(exc: object) -> int | None:
    """Best-effort HTTP status of a failure (``status``, int ``code`` or an httpx response)."""
    for attr in ("status", "status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def _symbolic_code(raw_error: object) -> str | None:
    code = getattr(raw_error, "code", None)
    return code.upper() if isinstance(code, str) else None
