# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# Shape of data going OUT of the API. A request either succeeds with a
# QueryResponse or fails with an ErrorResponse; there is no partial result.
# =============================================================================

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str


class QueryResponse(BaseModel):
    """Response for POST /api/query on success."""

    response: str = Field(description="The synthesized answer")


class ErrorResponse(BaseModel):
    """Body returned with a 500 when the pipeline fails."""

    error: str = Field(description="Human-readable failure reason")
