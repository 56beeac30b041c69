# =============================================================================
# Services Package — External Clients
# =============================================================================
#   - fmp.py: Financial Modeling Prep REST client (search, transcripts,
#     key metrics, financial statements, company profile)
#   - llm.py: Multi-provider LLM abstraction (OpenAI-compatible, Anthropic)
# =============================================================================
