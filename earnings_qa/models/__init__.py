# =============================================================================
# Models Package — Pydantic V2 API Schemas
# =============================================================================
# Request/response schemas for the HTTP API. Pipeline types (Intent,
# Transcript, FinancialSnapshot) live next to the code that produces them.
# =============================================================================
