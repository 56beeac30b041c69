from __future__ import annotations

from fastapi import APIRouter, Depends

from earnings_qa.api.deps import get_app_settings
from earnings_qa.config import Settings
from earnings_qa.models.responses import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(version=settings.app_version, service=settings.app_name)
