# =============================================================================
# FastAPI Application Entry Point
# =============================================================================
#
# create_app() builds the application around one Settings object:
#   - logging is configured from settings
#   - the FMP client is opened at start-up and closed at shutdown
#   - the LLM provider is created lazily by the first request (api/deps.py)
#
# Run locally with:
#   uvicorn earnings_qa.main:create_app --factory --reload
# or:
#   python -m earnings_qa.main
# =============================================================================

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from earnings_qa.api import health, query
from earnings_qa.config import Settings, get_settings
from earnings_qa.errors import PipelineError
from earnings_qa.logging_config import configure_logging
from earnings_qa.models.responses import ErrorResponse
from earnings_qa.services.fmp import FMPClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("%s %s starting", settings.app_name, settings.app_version)

    if getattr(app.state, "fmp", None) is None:
        app.state.fmp = FMPClient(settings)

    yield

    await app.state.fmp.aclose()
    logger.info("%s shutting down", settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Answers natural-language questions about public companies from "
            "earnings call transcripts and financial statements."
        ),
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response

    # Errors raised outside the query handler's own try/except (for example
    # a missing LLM API key while resolving dependencies).
    @app.exception_handler(PipelineError)
    @app.exception_handler(ValueError)
    async def pipeline_error_handler(request: Request, exc: Exception):
        logger.error("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=str(exc)).model_dump(),
        )

    app.include_router(health.router)
    app.include_router(query.router)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "earnings_qa.main:create_app", factory=True, host="0.0.0.0", port=8000,
    )
