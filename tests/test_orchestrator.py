# =============================================================================
# Integration Tests — Query Pipeline (LangGraph)
# =============================================================================
#
# Runs the compiled graph end to end with a scripted LLM (first call is the
# classifier, second is synthesis) and FakeFMP.
# =============================================================================

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from earnings_qa.agents.classifier import Category
from earnings_qa.agents.orchestrator import PipelineServices, ask
from earnings_qa.errors import ClassificationError, SynthesisError
from earnings_qa.services.fmp import Transcript
from earnings_qa.services.llm import LLMResponse


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="test-model", input_tokens=10, output_tokens=5)


def _scripted_llm(intent: dict, answer: str = "Final answer.") -> AsyncMock:
    llm = AsyncMock()
    llm.complete.side_effect = [_response(json.dumps(intent)), _response(answer)]
    return llm


def _synthesis_call(llm: AsyncMock):
    """kwargs of the second (synthesis) LLM call."""
    return llm.complete.call_args_list[1].kwargs


class TestScenarioEarningsSummary:
    """'Summarize Spotify's latest conference call'."""

    def test_evidence_is_transcript_and_summarize_called_once(self, fake_fmp, settings):
        llm = _scripted_llm(
            {"category": "Earnings Summary", "companies": ["Spotify"], "topic": "earnings call"},
            answer="Spotify summary.",
        )
        fmp = fake_fmp(
            symbols={"Spotify": "SPOT"},
            latest={"SPOT": Transcript(content="Spotify Q4 call transcript.", symbol="SPOT")},
        )

        state = _run(ask(
            "Summarize Spotify's latest conference call",
            PipelineServices(llm=llm, fmp=fmp, settings=settings),
        ))

        assert state["intent"].category is Category.EARNINGS_SUMMARY
        assert state["symbols"] == ["SPOT"]
        assert state["evidence"] == "Spotify Q4 call transcript."
        assert state["answer"] == "Spotify summary."
        assert llm.complete.await_count == 2

        synthesis = _synthesis_call(llm)
        assert "summaries of earnings calls" in synthesis["system"]
        user_message = synthesis["messages"][0]["content"]
        assert user_message.startswith(
            "Prompt: Summarize Spotify's latest conference call\n"
            "Category: Earnings Summary\n"
        )
        assert "Spotify Q4 call transcript." in user_message


class TestScenarioCeoComments:
    """'What are Mark Zuckerberg's and Satya Nadella's recent comments about AI?'"""

    def test_both_symbols_fetched_concurrently_in_order(self, fake_fmp, settings):
        llm = _scripted_llm({
            "category": "CEO Comments",
            "companies": ["Meta", "Microsoft"],
            "ceos": ["Mark Zuckerberg", "Satya Nadella"],
            "topic": "AI",
        })
        fmp = fake_fmp(
            symbols={"Meta": "META", "Microsoft": "MSFT"},
            recent={
                "META": [Transcript(content="Zuckerberg: Llama", symbol="META")],
                "MSFT": [Transcript(content="Nadella: Copilot", symbol="MSFT")],
            },
            delays={"META": 0.05, "MSFT": 0.0},
        )

        state = _run(ask(
            "What are Mark Zuckerberg's and Satya Nadella's recent comments about AI?",
            PipelineServices(llm=llm, fmp=fmp, settings=settings),
        ))

        assert state["symbols"] == ["META", "MSFT"]
        assert state["intent"].ceos == ("Mark Zuckerberg", "Satya Nadella")
        assert state["evidence"] == (
            "META transcripts:\nZuckerberg: Llama\n\n"
            "MSFT transcripts:\nNadella: Copilot"
        )
        assert sorted(fmp.fetch_calls()) == [
            ("recent_transcripts", "META"),
            ("recent_transcripts", "MSFT"),
        ]
        assert fmp.max_in_flight == 2
        assert "Topic: AI" in _synthesis_call(llm)["messages"][0]["content"]


class TestScenarioUnknownCategory:
    def test_fails_before_any_fetch(self, fake_fmp, settings):
        llm = AsyncMock()
        llm.complete.return_value = _response('{"category": "Unknown", "companies": ["Apple"]}')
        fmp = fake_fmp(symbols={"Apple": "AAPL"})

        with pytest.raises(ClassificationError):
            _run(ask("Tell me something", PipelineServices(llm=llm, fmp=fmp, settings=settings)))

        assert fmp.calls == []
        llm.complete.assert_awaited_once()


class TestDegradedPaths:
    def test_financial_metrics_all_failing_still_synthesises(self, fake_fmp, settings):
        llm = _scripted_llm({
            "category": "Financial Metrics",
            "companies": ["ServiceNow"],
            "topic": "large deals",
        })
        fmp = fake_fmp(symbols={"ServiceNow": "NOW"})

        state = _run(ask(
            "How many new large deals did ServiceNow sign in the last quarter?",
            PipelineServices(llm=llm, fmp=fmp, settings=settings),
        ))

        assert state["evidence"] == ""
        assert state["answer"] == "Final answer."
        assert len(fmp.fetch_calls()) == 4
        assert "Financial data and transcript:" in _synthesis_call(llm)["messages"][0]["content"]

    def test_no_resolved_companies_still_synthesises(self, fake_fmp, settings):
        llm = _scripted_llm({"category": "General Inquiry", "companies": ["Nowhere Inc"], "topic": "x"})
        fmp = fake_fmp()

        state = _run(ask("Tell me about Nowhere Inc", PipelineServices(llm=llm, fmp=fmp, settings=settings)))

        assert state["symbols"] == []
        assert state["evidence"] == ""
        assert fmp.fetch_calls() == []
        assert llm.complete.await_count == 2

    def test_synthesis_failure_propagates(self, fake_fmp, settings):
        llm = AsyncMock()
        llm.complete.side_effect = [
            _response('{"category": "General Inquiry", "companies": [], "topic": "x"}'),
            RuntimeError("LLM down"),
        ]
        with pytest.raises(SynthesisError):
            _run(ask("anything", PipelineServices(llm=llm, fmp=fake_fmp(), settings=settings)))

    def test_mixed_query_uses_configured_keywords(self, fake_fmp, settings):
        settings = settings.model_copy(update={"metrics_keywords": ["buyback"]})
        llm = _scripted_llm({"category": "Mixed Query", "companies": ["Apple"], "topic": "x"})
        fmp = fake_fmp(symbols={"Apple": "AAPL"})

        _run(ask(
            "Summarize Apple's call and the buyback plan",
            PipelineServices(llm=llm, fmp=fmp, settings=settings),
        ))

        assert ("financial_metrics", "AAPL") in fmp.calls
