# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# Shape of data coming INTO the API. FastAPI validates request bodies
# against these models and returns a 422 for anything that does not fit.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """
    Request body for POST /api/query — ask a question about public companies.

    Example:
        {"prompt": "Summarize Spotify's latest conference call"}
    """

    prompt: str = Field(
        ...,
        description="Free-text question about one or more public companies",
        examples=["Summarize Spotify's latest conference call"],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"prompt": "Summarize Spotify's latest conference call"},
                {
                    "prompt": (
                        "What are Mark Zuckerberg's and Satya Nadella's "
                        "recent comments about AI?"
                    ),
                },
                {
                    "prompt": (
                        "How many new large deals did ServiceNow sign in "
                        "the last quarter?"
                    ),
                },
            ]
        }
    )
