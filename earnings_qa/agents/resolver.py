# =============================================================================
# Identifier Resolver — Company Name → Ticker Symbol
# =============================================================================
#
# The classifier already normalises brand names to the parent company
# ("Facebook" → "Meta"), so resolution is a single best-match FMP search.
#
# A miss (no match, network error, malformed payload) is expected and
# non-fatal: resolve() returns None and resolve_companies() drops the name.
# The pipeline carries on even if nothing resolves.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from earnings_qa.errors import DataUnavailable
from earnings_qa.services.fmp import FMPClient

logger = logging.getLogger(__name__)


async def resolve(company_name: str, fmp: FMPClient) -> str | None:
    """Return the ticker of the best FMP match for a company name, or None."""
    try:
        matches = await fmp.search(company_name, limit=1)
    except DataUnavailable as e:
        logger.warning("Failed to fetch ticker for %s: %s", company_name, e)
        return None

    if not matches or not isinstance(matches[0], dict):
        logger.warning("No ticker match for %s", company_name)
        return None

    symbol = matches[0].get("symbol")
    if not symbol:
        logger.warning("Ticker match for %s has no symbol", company_name)
        return None
    return symbol


async def resolve_companies(
    company_names: Sequence[str],
    fmp: FMPClient,
) -> list[str]:
    """
    Resolve every company name concurrently.

    The result keeps the order of `company_names` (not completion order)
    with unresolved names removed.
    """
    symbols = await asyncio.gather(
        *(resolve(name, fmp) for name in company_names),
    )
    resolved = [symbol for symbol in symbols if symbol]
    logger.info(
        "Resolved %d/%d companies: %s",
        len(resolved), len(company_names), resolved,
    )
    return resolved
