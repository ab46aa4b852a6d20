"""Final request status resolution from stage outcomes and remediation."""

from __future__ import annotations

from collections.abc import Iterable

from traceguard.models.domain import STAGE_ORDER, ErrorClassification, StageOutcome, StageStatus


def resolve_status(
    outcomes: Iterable[StageOutcome],
    remediation_triggered: bool,
    remediation_succeeded: bool,
    has_usable_response: bool,
) -> StageStatus:
    """Combine per-stage results into OK, DEGRADED or ERROR.

    ERROR is reserved for the case where nothing usable can be returned; a
    stage error on its own only ever degrades the request.
    """
    if not has_usable_response:
        return StageStatus.ERROR

    has_stage_errors = any(o.error is not None for o in outcomes)

    if has_stage_errors and remediation_succeeded:
        return StageStatus.DEGRADED
    if remediation_triggered and remediation_succeeded:
        return StageStatus.DEGRADED
    if remediation_triggered and not remediation_succeeded and not has_usable_response:
        return StageStatus.ERROR
    if has_stage_errors and has_usable_response:
        return StageStatus.DEGRADED
    return StageStatus.OK


def dominant_error(outcomes: Iterable[StageOutcome]) -> ErrorClassification | None:
    """First non-null error in pipeline order: the single root cause of a request.

    Outcomes are ranked by stage order, not by the order they were recorded in.
    """
    for outcome in sorted(outcomes, key=lambda o: STAGE_ORDER.index(o.stage)):
        if outcome.error is not None:
            return outcome.error
    return None
