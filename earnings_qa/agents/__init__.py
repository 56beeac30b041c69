# =============================================================================
# Agents Package — Query Pipeline
# =============================================================================
#   - classifier.py: LLM intent classification into a closed category set
#   - resolver.py: company name → ticker symbol via FMP search
#   - aggregator.py: category-keyed fetch strategies and evidence merging
#   - synthesis.py: final LLM answer (summarize / extract)
#   - orchestrator.py: LangGraph graph wiring the steps together
# =============================================================================
