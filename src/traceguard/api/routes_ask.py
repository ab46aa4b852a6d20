"""Ask endpoint."""

from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from traceguard.api.dependencies import get_pipeline
from traceguard.exceptions import PipelineAbortedError
from traceguard.models.schemas import AskBody, AskRequest, AskResponse, ChaosFlags, ErrorResponse
from traceguard.pipeline.orchestrator import AskPipeline

router = APIRouter()


@router.post(
    "/v1/ask",
    response_model=AskResponse,
    responses={502: {"model": ErrorResponse}},
)
async def ask(
    body: AskBody,
    request: Request,
    break_tool: bool = Query(False, alias="breakTool"),
    bad_retrieval: bool = Query(False, alias="badRetrieval"),
    policy_risk: bool = Query(False, alias="policyRisk"),
    token_spike: bool = Query(False, alias="tokenSpike"),
    pipeline: AskPipeline = Depends(get_pipeline),
):
    ask_request = AskRequest(
        request_id=body.request_id or getattr(request.state, "request_id", None) or str(uuid4()),
        tenant_id=body.tenant or "default",
        input_text=body.input,
        chaos=ChaosFlags(
            break_tool=break_tool,
            bad_retrieval=bad_retrieval,
            policy_risk=policy_risk,
            token_spike=token_spike,
        ),
    )
    try:
        return await pipeline.execute(ask_request)
    except PipelineAbortedError as e:
        error = ErrorResponse(
            request_id=ask_request.request_id,
            stage=e.stage.value,
            error_type=e.classification.type.value,
            error_code=e.classification.code.value,
            message=e.classification.message,
        )
        return JSONResponse(status_code=502, content=error.model_dump())
