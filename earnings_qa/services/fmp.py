# =============================================================================
# Financial Modeling Prep Client — Symbol Search & Evidence Fetchers
# =============================================================================
#
# Thin async wrapper around the FMP v3 REST API. Every method is keyed by a
# ticker symbol (except search), idempotent, and returns typed values:
#
#   search()                 — /search?query=&limit=          → list of matches
#   latest_transcript()      — /earning_call_transcript/{s}   → Transcript
#   recent_transcripts()     — /earning_call_transcript/{s}   → list[Transcript]
#   transcript_for_quarter() — /earning_call_transcript/{s}?year=&quarter=
#   financial_metrics()      — /key-metrics/{s}               → FinancialSnapshot
#   income_statement()       — /income-statement/{s}          → FinancialSnapshot
#   balance_sheet()          — /balance-sheet-statement/{s}   → FinancialSnapshot
#   company_profile()        — /profile/{s}                   → FinancialSnapshot
#
# ERROR CONTRACT: transport errors, non-2xx responses, undecodable bodies,
# FMP's {"Error Message": ...} payloads and empty results all surface as
# DataUnavailable. recent_transcripts() is the one exception for empty
# results: it returns [] and only raises on remote failure.
#
# One httpx.AsyncClient is shared for the lifetime of the application; the
# client's timeout is the only timeout applied to FMP calls. No retries.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from earnings_qa.config import Settings
from earnings_qa.errors import DataUnavailable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transcript:
    """An earnings call transcript plus the metadata FMP returns with it."""

    content: str
    symbol: str | None = None
    year: int | None = None
    quarter: int | None = None
    date: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Transcript:
        return cls(
            content=payload.get("content") or "",
            symbol=payload.get("symbol"),
            year=payload.get("year"),
            quarter=payload.get("quarter"),
            date=payload.get("date"),
        )


@dataclass(frozen=True)
class FinancialSnapshot:
    """
    One flat record for the most recent reporting period of one symbol.

    `kind` is one of "metrics", "income_statement", "balance_sheet" or
    "profile". `data` keeps FMP's field order so rendering is stable.
    """

    kind: str
    symbol: str
    data: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class FMPClient:
    """Async FMP API client. Build once per process and share across requests."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not settings.fmp_api_key:
            logger.warning(
                "FMP_API_KEY is not set; FMP requests will be rejected"
            )
        self._api_key = settings.fmp_api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.fmp_base_url,
            timeout=settings.fmp_timeout_seconds,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # -----------------------------------------------------------------------
    # Symbol search
    # -----------------------------------------------------------------------

    async def search(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """Name search; returns FMP match records, best match first."""
        return await self._get(
            "/search", source="symbol search", symbol=query,
            query=query, limit=limit,
        )

    # -----------------------------------------------------------------------
    # Transcripts
    # -----------------------------------------------------------------------

    async def latest_transcript(self, symbol: str) -> Transcript:
        rows = await self._get(
            f"/earning_call_transcript/{symbol}",
            source="latest transcript", symbol=symbol, limit=1,
        )
        return self._first_transcript(rows, "latest transcript", symbol)

    async def recent_transcripts(
        self, symbol: str, limit: int = 3,
    ) -> list[Transcript]:
        rows = await self._get(
            f"/earning_call_transcript/{symbol}",
            source="recent transcripts", symbol=symbol, limit=limit,
        )
        transcripts = [
            Transcript.from_payload(row)
            for row in rows[:limit]
            if isinstance(row, dict)
        ]
        if len(transcripts) < len(rows[:limit]):
            logger.warning(
                "Skipped %d malformed transcript rows for %s",
                len(rows[:limit]) - len(transcripts), symbol,
            )
        return transcripts

    async def transcript_for_quarter(
        self, symbol: str, year: int, quarter: int,
    ) -> Transcript:
        source = f"Q{quarter} {year} transcript"
        rows = await self._get(
            f"/earning_call_transcript/{symbol}",
            source=source, symbol=symbol, year=year, quarter=quarter,
        )
        return self._first_transcript(rows, source, symbol)

    # -----------------------------------------------------------------------
    # Financial snapshots
    # -----------------------------------------------------------------------

    async def financial_metrics(self, symbol: str) -> FinancialSnapshot:
        return await self._snapshot(
            f"/key-metrics/{symbol}", "metrics", symbol, limit=1,
        )

    async def income_statement(self, symbol: str) -> FinancialSnapshot:
        return await self._snapshot(
            f"/income-statement/{symbol}", "income_statement", symbol, limit=1,
        )

    async def balance_sheet(self, symbol: str) -> FinancialSnapshot:
        return await self._snapshot(
            f"/balance-sheet-statement/{symbol}", "balance_sheet", symbol,
            limit=1,
        )

    async def company_profile(self, symbol: str) -> FinancialSnapshot:
        return await self._snapshot(f"/profile/{symbol}", "profile", symbol)

    # -----------------------------------------------------------------------
    # Internal Helpers
    # -----------------------------------------------------------------------

    async def _snapshot(
        self, path: str, kind: str, symbol: str, **params: Any,
    ) -> FinancialSnapshot:
        rows = await self._get(path, source=kind, symbol=symbol, **params)
        if not rows or not isinstance(rows[0], dict) or not rows[0]:
            raise DataUnavailable(kind, symbol, "empty result")
        return FinancialSnapshot(kind=kind, symbol=symbol, data=rows[0])

    @staticmethod
    def _first_transcript(
        rows: list[Any], source: str, symbol: str,
    ) -> Transcript:
        if not rows or not isinstance(rows[0], dict):
            raise DataUnavailable(source, symbol, "no transcript found")
        transcript = Transcript.from_payload(rows[0])
        if not transcript.content:
            raise DataUnavailable(source, symbol, "transcript has no content")
        return transcript

    async def _get(
        self, path: str, source: str, symbol: str, **params: Any,
    ) -> list[Any]:
        """GET an FMP endpoint and return its JSON list payload."""
        params["apikey"] = self._api_key
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            # str(e) would include the request URL, and with it the apikey
            raise DataUnavailable(
                source, symbol, f"HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise DataUnavailable(
                source, symbol, f"{type(e).__name__}: {e}",
            ) from e
        except ValueError as e:
            raise DataUnavailable(source, symbol, "invalid JSON response") from e

        if isinstance(payload, dict) and "Error Message" in payload:
            raise DataUnavailable(source, symbol, payload["Error Message"])
        if not isinstance(payload, list):
            raise DataUnavailable(source, symbol, "unexpected response shape")
        return payload
