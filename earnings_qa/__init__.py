# =============================================================================
# Earnings Call Q&A Agent
# =============================================================================
# Answers natural-language questions about public companies. A prompt is
# classified into an intent, company names are resolved to tickers, the
# matching Financial Modeling Prep documents are fetched concurrently, and
# the merged evidence is synthesized into an answer by an LLM.
#
# Package structure:
#   earnings_qa/
#   ├── api/          → FastAPI route handlers (query, health)
#   ├── agents/       → LangGraph pipeline: classify, resolve, aggregate,
#   │                    synthesise
#   ├── models/       → Pydantic V2 request/response schemas
#   └── services/     → External clients (FMP REST API, LLM providers)
# =============================================================================
