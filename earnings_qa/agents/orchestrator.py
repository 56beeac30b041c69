# =============================================================================
# LangGraph Orchestrator — Query Pipeline Assembly
# =============================================================================
#
# Wires the four pipeline steps into a LangGraph StateGraph:
#
#   START ──▶ classify ──▶ resolve ──▶ aggregate ──▶ synthesise ──▶ END
#
#   classify   — prompt → Intent (ClassificationError aborts the run)
#   resolve    — Intent.companies → ticker symbols (misses dropped)
#   aggregate  — category strategy → evidence string (never raises except
#                for an unsupported category)
#   synthesise — evidence + prompt → answer (SynthesisError aborts the run)
#
# The graph is linear and compiled once at import. Collaborators (LLM
# provider, FMP client, settings) travel in the state as a PipelineServices
# bundle so each request uses the objects built at application start-up.
# The state holds live clients, so no checkpointer may be configured.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from earnings_qa.agents.aggregator import build_evidence
from earnings_qa.agents.classifier import Category, Intent, classify
from earnings_qa.agents.resolver import resolve_companies
from earnings_qa.agents.synthesis import (
    SynthesisResult,
    build_request_framing,
    extract,
    summarize,
)
from earnings_qa.config import Settings
from earnings_qa.services.fmp import FMPClient
from earnings_qa.services.llm import LLMProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pipeline State Schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineServices:
    """Process-wide collaborators shared by every request."""

    llm: LLMProvider
    fmp: FMPClient
    settings: Settings


class PipelineState(TypedDict, total=False):
    """
    State that flows through the graph.

    total=False so nodes only return the keys they update.
    """

    # --- Input (set by caller) ---
    prompt: str
    services: PipelineServices

    # --- Intermediate (set by nodes) ---
    intent: Intent
    symbols: list[str]
    evidence: str

    # --- Output (set by synthesise node) ---
    answer: str
    model: str
    input_tokens: int
    output_tokens: int


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def classify_node(state: PipelineState) -> dict:
    services = state["services"]
    intent = await classify(
        state["prompt"],
        services.llm,
        max_tokens=services.settings.classifier_max_tokens,
    )
    return {"intent": intent}


async def resolve_node(state: PipelineState) -> dict:
    intent = state["intent"]
    symbols = await resolve_companies(intent.companies, state["services"].fmp)
    if not symbols:
        logger.warning(
            "No valid companies identified in the prompt "
            "(category=%s, companies=%s)",
            intent.category.value, list(intent.companies),
        )
    return {"symbols": symbols}


async def aggregate_node(state: PipelineState) -> dict:
    services = state["services"]
    evidence = await build_evidence(
        state["intent"].category,
        state["symbols"],
        state["prompt"],
        services.fmp,
        transcript_limit=services.settings.transcript_limit,
        metrics_keywords=services.settings.metrics_keywords,
    )
    return {"evidence": evidence}


async def synthesise_node(state: PipelineState) -> dict:
    """
    Earnings Summary goes through summarize() with the request framing;
    every other category goes through extract() with the raw prompt.
    """
    intent = state["intent"]
    llm = state["services"].llm
    evidence = state.get("evidence") or ""

    if intent.category is Category.EARNINGS_SUMMARY:
        framing = build_request_framing(
            state["prompt"], intent.category.value, intent.topic, intent.ceos,
        )
        result: SynthesisResult = await summarize(evidence, framing, llm)
    else:
        result = await extract(
            [evidence],
            intent.topic,
            intent.category.value,
            state["prompt"],
            llm,
        )

    return {
        "answer": result.answer,
        "model": result.model,
        "input_tokens": result.input_tokens,
        "output_tokens": result.output_tokens,
    }


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(PipelineState)
_builder.add_node("classify", classify_node)
_builder.add_node("resolve", resolve_node)
_builder.add_node("aggregate", aggregate_node)
_builder.add_node("synthesise", synthesise_node)

_builder.add_edge(START, "classify")
_builder.add_edge("classify", "resolve")
_builder.add_edge("resolve", "aggregate")
_builder.add_edge("aggregate", "synthesise")
_builder.add_edge("synthesise", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def ask(prompt: str, services: PipelineServices) -> PipelineState:
    """
    Run the full pipeline for one prompt and return the final state.

    Raises:
        ClassificationError: The prompt could not be classified.
        UnsupportedCategoryError: No strategy exists for the category.
        SynthesisError: The final LLM call failed.
    """
    logger.info("Invoking query pipeline: prompt='%s'", prompt[:80])

    result = await graph.ainvoke({"prompt": prompt, "services": services})

    logger.info(
        "Query pipeline complete: model=%s, symbols=%s, evidence=%d chars, "
        "answer=%d chars",
        result.get("model", "n/a"),
        result.get("symbols", []),
        len(result.get("evidence", "")),
        len(result.get("answer", "")),
    )
    return result
