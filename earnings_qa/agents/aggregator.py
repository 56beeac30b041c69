# =============================================================================
# Aggregation Dispatcher — Category → Fetch Strategy → Evidence Payload
# =============================================================================
#
# Each category has exactly one strategy: an async function that decides
# which FMP fetchers to run, runs independent ones concurrently, and merges
# their results into a single evidence string for the synthesis step.
#
#   CEO Comments       recent transcripts, every symbol      (concurrent)
#   Earnings Summary   latest transcript, first symbol
#   Financial Metrics  metrics + transcript + income + balance, first symbol
#                                                             (concurrent)
#   General Inquiry    recent transcripts, first symbol
#   Mixed Query        latest transcript (first) + recent transcripts (all)
#                      [+ metrics (first) when the prompt asks for numbers]
#                                                             (concurrent)
#   Company Info       profile + metrics, first symbol        (concurrent)
#
# FAULT ISOLATION: every fetch is wrapped in fallible(), which turns any
# exception into the UNAVAILABLE sentinel. One failed source never
# cancels its siblings; merge functions simply skip unavailable values.
#
# ERROR POLICY: an unknown category raises UnsupportedCategoryError before
# any fetch. Any other exception escaping a strategy is logged and the
# evidence collapses to "", so synthesis still runs on degraded input.
#
# ORDERING: section order is fixed per category. asyncio.gather() returns
# results in argument order, so completion order never leaks into output.
# =============================================================================

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from earnings_qa.agents.classifier import Category
from earnings_qa.errors import DataUnavailable, UnsupportedCategoryError
from earnings_qa.services.fmp import FinancialSnapshot, FMPClient, Transcript

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_METRICS_KEYWORDS: tuple[str, ...] = ("how many", "revenue", "spending")


# ---------------------------------------------------------------------------
# Fallible Fetch Wrapper
# ---------------------------------------------------------------------------


class Unavailable(Enum):
    """Marker type for a fetch that failed or returned nothing."""

    TOKEN = "unavailable"

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable.TOKEN


async def fallible(fetch: Awaitable[T], label: str) -> T | Unavailable:
    """Await a fetch, resolving any failure to UNAVAILABLE."""
    try:
        return await fetch
    except DataUnavailable as e:
        logger.warning("%s skipped: %s", label, e)
        return UNAVAILABLE
    except Exception as e:
        logger.warning("%s failed: %s", label, e, exc_info=True)
        return UNAVAILABLE


# ---------------------------------------------------------------------------
# Strategy Context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchContext:
    """Everything a strategy needs for one request."""

    symbols: tuple[str, ...]
    prompt: str
    fmp: FMPClient
    transcript_limit: int = 3
    metrics_keywords: tuple[str, ...] = DEFAULT_METRICS_KEYWORDS

    @property
    def primary(self) -> str:
        """Single-subject categories only look at the first resolved symbol."""
        return self.symbols[0]

    def asks_for_metrics(self) -> bool:
        prompt = self.prompt.lower()
        return any(keyword.lower() in prompt for keyword in self.metrics_keywords)


Strategy = Callable[[FetchContext], Awaitable[str]]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


async def ceo_comments(ctx: FetchContext) -> str:
    blocks = await _comment_blocks(ctx)
    return "\n\n".join(blocks)


async def earnings_summary(ctx: FetchContext) -> str:
    transcript = await fallible(
        ctx.fmp.latest_transcript(ctx.primary),
        f"Latest transcript for {ctx.primary}",
    )
    if transcript is UNAVAILABLE:
        return ""
    return transcript.content


async def financial_metrics(ctx: FetchContext) -> str:
    symbol = ctx.primary
    metrics, transcript, income, balance = await asyncio.gather(
        fallible(ctx.fmp.financial_metrics(symbol), f"Key metrics for {symbol}"),
        fallible(ctx.fmp.latest_transcript(symbol), f"Latest transcript for {symbol}"),
        fallible(ctx.fmp.income_statement(symbol), f"Income statement for {symbol}"),
        fallible(ctx.fmp.balance_sheet(symbol), f"Balance sheet for {symbol}"),
    )
    return _merge_sections([
        ("Key Financial Metrics", metrics),
        ("Income Statement", income),
        ("Balance Sheet", balance),
        ("Transcript", transcript),
    ])


async def general_inquiry(ctx: FetchContext) -> str:
    transcripts = await fallible(
        ctx.fmp.recent_transcripts(ctx.primary, limit=ctx.transcript_limit),
        f"Recent transcripts for {ctx.primary}",
    )
    if transcripts is UNAVAILABLE:
        return ""
    return _join_contents(transcripts)


async def mixed_query(ctx: FetchContext) -> str:
    symbol = ctx.primary
    wants_metrics = ctx.asks_for_metrics()

    jobs: list[Awaitable] = [
        fallible(ctx.fmp.latest_transcript(symbol), f"Latest transcript for {symbol}"),
        _comment_blocks(ctx),
    ]
    if wants_metrics:
        jobs.append(
            fallible(ctx.fmp.financial_metrics(symbol), f"Key metrics for {symbol}"),
        )
    results = await asyncio.gather(*jobs)
    summary, comment_blocks = results[0], results[1]

    sections: list[str] = []
    if summary is not UNAVAILABLE:
        sections.append(f"Earnings Summary:\n{summary.content}")
    sections.append("Comments:\n" + "\n\n".join(comment_blocks))
    if wants_metrics:
        metrics = results[2]
        sections.append(
            "No financial metrics available"
            if metrics is UNAVAILABLE
            else f"Metrics:\n{_render(metrics)}"
        )
    return "\n\n".join(sections)


async def company_info(ctx: FetchContext) -> str:
    symbol = ctx.primary
    profile, metrics = await asyncio.gather(
        fallible(ctx.fmp.company_profile(symbol), f"Company profile for {symbol}"),
        fallible(ctx.fmp.financial_metrics(symbol), f"Key metrics for {symbol}"),
    )
    return _merge_sections([
        ("Company Profile", profile),
        ("Key Financial Metrics", metrics),
    ])


STRATEGIES: dict[Category, Strategy] = {
    Category.COMPANY_INFO: company_info,
    Category.CEO_COMMENTS: ceo_comments,
    Category.EARNINGS_SUMMARY: earnings_summary,
    Category.FINANCIAL_METRICS: financial_metrics,
    Category.GENERAL_INQUIRY: general_inquiry,
    Category.MIXED_QUERY: mixed_query,
}

_missing = set(Category) - STRATEGIES.keys()
if _missing:
    raise RuntimeError(f"No aggregation strategy for: {sorted(_missing)}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def build_evidence(
    category: Category,
    symbols: Sequence[str],
    prompt: str,
    fmp: FMPClient,
    transcript_limit: int = 3,
    metrics_keywords: Sequence[str] = DEFAULT_METRICS_KEYWORDS,
) -> str:
    """
    Run the strategy for `category` and return the merged evidence.

    Always returns a string. Returns "" without fetching anything when no
    symbols were resolved, and "" when the strategy itself fails.

    Raises:
        UnsupportedCategoryError: No strategy is registered for `category`.
    """
    strategy = STRATEGIES.get(category)
    if strategy is None:
        raise UnsupportedCategoryError(category)

    if not symbols:
        logger.warning(
            "No resolved symbols for category %s; evidence is empty",
            getattr(category, "value", category),
        )
        return ""

    ctx = FetchContext(
        symbols=tuple(symbols),
        prompt=prompt,
        fmp=fmp,
        transcript_limit=transcript_limit,
        metrics_keywords=tuple(metrics_keywords),
    )

    try:
        evidence = await strategy(ctx)
    except Exception:
        logger.exception(
            "Error while fetching and processing FMP data for %s",
            list(ctx.symbols),
        )
        return ""

    logger.info(
        "Built evidence for %s: %d chars from %s",
        getattr(category, "value", category), len(evidence), list(ctx.symbols),
    )
    return evidence


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


async def _comment_blocks(ctx: FetchContext) -> list[str]:
    """One labeled transcript block per symbol, in symbol order."""
    return list(await asyncio.gather(
        *(_transcript_block(ctx, symbol) for symbol in ctx.symbols),
    ))


async def _transcript_block(ctx: FetchContext, symbol: str) -> str:
    transcripts = await fallible(
        ctx.fmp.recent_transcripts(symbol, limit=ctx.transcript_limit),
        f"Recent transcripts for {symbol}",
    )
    if transcripts is UNAVAILABLE or not transcripts:
        return f"{symbol}: "
    return f"{symbol} transcripts:\n{_join_contents(transcripts)}"


def _join_contents(transcripts: Sequence[Transcript]) -> str:
    return "\n\n".join(t.content for t in transcripts)


def _render(value: Transcript | FinancialSnapshot) -> str:
    if isinstance(value, Transcript):
        return value.content
    return json.dumps(value.data, indent=2, default=str)


def _merge_sections(
    sections: Sequence[tuple[str, Transcript | FinancialSnapshot | Unavailable]],
) -> str:
    """Render available sections as "<Title>:\\n<body>"; "" if none are available."""
    rendered = [
        f"{title}:\n{_render(value)}"
        for title, value in sections
        if value is not UNAVAILABLE
    ]
    return "\n\n".join(rendered)
