# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - deps.py: dependency providers (settings, FMP client, LLM provider)
#   - query.py: POST /api/query, the question answering endpoint
#   - health.py: GET /health
# =============================================================================
