# =============================================================================
# Query API — Natural-Language Questions About Public Companies
# =============================================================================
#
# POST /api/query {"prompt": "..."}
#
#   200 {"response": "<answer>"}
#   500 {"error": "<reason>"}  — classification failure, unsupported
#                                category, synthesis failure, or any other
#                                pipeline-level error
#
# Per-company and per-fetch failures never reach this layer; they degrade
# the evidence inside the pipeline instead.
# =============================================================================

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from earnings_qa.agents.orchestrator import PipelineServices, ask
from earnings_qa.api.deps import get_pipeline_services
from earnings_qa.errors import PipelineError
from earnings_qa.models.requests import QueryRequest
from earnings_qa.models.responses import ErrorResponse, QueryResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Question Answering"])


@router.post(
    "/api/query",
    response_model=QueryResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Answer a question about public companies",
    description=(
        "Classifies the prompt, resolves company names to tickers, fetches "
        "earnings call transcripts and financial statements from Financial "
        "Modeling Prep, and synthesizes an answer with the configured LLM."
    ),
)
async def query_endpoint(
    request: QueryRequest,
    services: PipelineServices = Depends(get_pipeline_services),
) -> QueryResponse | JSONResponse:
    start_time = time.monotonic()

    try:
        result = await ask(request.prompt, services)
    except PipelineError as e:
        logger.error("Error processing prompt: %s", e)
        return _error(str(e))
    except Exception as e:
        logger.exception("Query pipeline failed: %s", e)
        return _error(str(e) or type(e).__name__)

    logger.info(
        "Answered prompt in %d ms",
        int((time.monotonic() - start_time) * 1000),
    )
    return QueryResponse(response=result.get("answer", ""))


def _error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=message).model_dump(),
    )
