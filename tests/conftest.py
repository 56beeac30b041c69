# =============================================================================
# Shared Test Fixtures
# =============================================================================
#
# No test needs API keys, network access, or log files. The FMP client is
# replaced by FakeFMP, an in-memory stand-in with the same async methods
# that records every call and how many fetches were in flight at once.
# =============================================================================

from __future__ import annotations

import asyncio

import pytest

from earnings_qa.config import Settings
from earnings_qa.errors import DataUnavailable


class FakeFMP:
    """
    In-memory FMPClient replacement.

    Each table maps a symbol to a return value or to an exception instance
    to raise. Missing entries behave like an empty FMP result.
    """

    def __init__(
        self,
        symbols: dict | None = None,
        latest: dict | None = None,
        recent: dict | None = None,
        metrics: dict | None = None,
        income: dict | None = None,
        balance: dict | None = None,
        profile: dict | None = None,
        delays: dict | None = None,
    ):
        self.symbols = symbols or {}
        self.latest = latest or {}
        self.recent = recent or {}
        self.metrics = metrics or {}
        self.income = income or {}
        self.balance = balance or {}
        self.profile = profile or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _answer(self, method: str, table: dict, symbol: str, empty=None):
        self.calls.append((method, symbol))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(symbol, 0.01))
        finally:
            self.in_flight -= 1

        value = table.get(symbol, empty)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise DataUnavailable(method, symbol, "empty result")
        return value

    async def search(self, query: str, limit: int = 1):
        symbol = await self._answer("search", self.symbols, query, empty="")
        return [{"symbol": symbol, "name": query}] if symbol else []

    async def latest_transcript(self, symbol: str):
        return await self._answer("latest_transcript", self.latest, symbol)

    async def recent_transcripts(self, symbol: str, limit: int = 3):
        rows = await self._answer(
            "recent_transcripts", self.recent, symbol, empty=[],
        )
        return rows[:limit]

    async def financial_metrics(self, symbol: str):
        return await self._answer("financial_metrics", self.metrics, symbol)

    async def income_statement(self, symbol: str):
        return await self._answer("income_statement", self.income, symbol)

    async def balance_sheet(self, symbol: str):
        return await self._answer("balance_sheet", self.balance, symbol)

    async def company_profile(self, symbol: str):
        return await self._answer("company_profile", self.profile, symbol)

    def fetch_calls(self) -> list[tuple[str, str]]:
        """Every call except symbol searches."""
        return [call for call in self.calls if call[0] != "search"]


@pytest.fixture
def fake_fmp():
    """Factory for FakeFMP instances: fake_fmp(latest={...}, ...)."""
    return FakeFMP


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        log_dir=None,
        fmp_api_key="test-fmp-key",
        llm_api_key="test-llm-key",
    )
