"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from traceguard.api.dependencies import get_settings
from traceguard.config.settings import Settings
from traceguard.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        service=settings.service_name,
        environment=settings.environment,
        retrieval_provider=settings.retrieval_provider,
        llm_provider=settings.llm_provider,
    )
