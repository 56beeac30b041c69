# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# All process-wide configuration lives in one `Settings` object: API
# credentials and base URLs for Financial Modeling Prep (FMP) and the LLM
# provider, pipeline tuning knobs, and logging options.
#
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `FMP_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# The object is read-only after start-up. It is built once by
# get_settings() and handed to the FMP client, LLM provider and pipeline
# explicitly rather than imported as a global by each of them.
#
# USAGE:
#   from earnings_qa.config import get_settings
#   settings = get_settings()
# =============================================================================

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are suitable for local development. API keys have no usable
    defaults and must be provided through the environment or a .env file.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Earnings Call Q&A Agent"
    app_version: str = "0.1.0"
    debug: bool = False

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    # log_dir=None disables the rotating file handlers (console only).
    # combined.log receives everything at log_level and above; error.log
    # receives ERROR and above.
    # -------------------------------------------------------------------------
    log_level: str = "INFO"
    log_dir: str | None = "logs"
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 5

    # -------------------------------------------------------------------------
    # Financial Modeling Prep
    # -------------------------------------------------------------------------
    # Every FMP call passes the key as the `apikey` query parameter.
    # The timeout is the only timeout in the pipeline: a slow endpoint
    # delays its whole fetch batch but never cancels sibling fetches.
    # -------------------------------------------------------------------------
    fmp_api_key: str = ""
    fmp_base_url: str = "https://financialmodelingprep.com/api/v3"
    fmp_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------
    # transcript_limit: how many recent earnings call transcripts to pull per
    #   company for CEO Comments / General Inquiry / Mixed Query.
    # metrics_keywords: lower-case substrings that make a Mixed Query also
    #   fetch the key-metrics snapshot.
    # -------------------------------------------------------------------------
    transcript_limit: int = Field(default=3, ge=1)
    metrics_keywords: list[str] = ["how many", "revenue", "spending"]

    # -------------------------------------------------------------------------
    # LLM Configuration — Multi-Provider
    # -------------------------------------------------------------------------
    #   - "openai_compatible": OpenAI itself or any OpenAI-compatible API
    #     (set llm_base_url for non-OpenAI hosts)
    #   - "anthropic": Claude via the native Anthropic SDK
    #
    # llm_api_key overrides the provider-specific key when set.
    # -------------------------------------------------------------------------
    llm_provider: str = "openai_compatible"
    llm_base_url: str | None = None
    llm_api_key: str | None = None
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 2000
    classifier_max_tokens: int = 2000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, build a Settings directly (e.g. `Settings(log_dir=None)`) and
    pass it to create_app() instead of going through this cache.
    """
    return Settings()
