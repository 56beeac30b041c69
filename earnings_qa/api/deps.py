# =============================================================================
# API Dependencies — FastAPI Dependency Injection for Pipeline Services
# =============================================================================
#
# The FMP client and LLM provider are built once per application and cached
# on `app.state`; every request receives the same instances through these
# dependencies. Tests replace them via `app.dependency_overrides`.
#
# The LLM provider is created on first use so that a missing API key turns
# into a 500 {"error": ...} on /api/query instead of a failed start-up.
# =============================================================================

from __future__ import annotations

from fastapi import Depends, Request

from earnings_qa.agents.orchestrator import PipelineServices
from earnings_qa.config import Settings
from earnings_qa.services.fmp import FMPClient
from earnings_qa.services.llm import LLMProvider, create_llm_provider


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fmp_client(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> FMPClient:
    fmp = getattr(request.app.state, "fmp", None)
    if fmp is None:
        fmp = FMPClient(settings)
        request.app.state.fmp = fmp
    return fmp


def get_llm(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> LLMProvider:
    """
    Return the shared LLM provider, creating it on first use.

    Raises:
        ValueError: Unknown provider type or missing API key.
    """
    llm = getattr(request.app.state, "llm", None)
    if llm is None:
        llm = create_llm_provider(settings)
        request.app.state.llm = llm
    return llm


def get_pipeline_services(
    settings: Settings = Depends(get_app_settings),
    fmp: FMPClient = Depends(get_fmp_client),
    llm: LLMProvider = Depends(get_llm),
) -> PipelineServices:
    return PipelineServices(llm=llm, fmp=fmp, settings=settings)
