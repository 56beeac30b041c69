# =============================================================================
# Unit Tests — Intent Classifier
# =============================================================================
#
# Uses a mock LLM provider; checks the parsing rules and that every
# malformed output becomes a ClassificationError.
# =============================================================================

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from earnings_qa.agents.classifier import Category, Intent, classify, parse_intent
from earnings_qa.errors import ClassificationError
from earnings_qa.services.llm import LLMResponse


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _llm_returning(content: str) -> AsyncMock:
    llm = AsyncMock()
    llm.complete.return_value = LLMResponse(
        content=content, model="test-model", input_tokens=50, output_tokens=20,
    )
    return llm


# ---------------------------------------------------------------------------
# Test: parse_intent
# ---------------------------------------------------------------------------


class TestParseIntent:
    def test_full_object(self):
        intent = parse_intent(json.dumps({
            "category": "CEO Comments",
            "companies": ["Meta", "Microsoft"],
            "ceos": ["Mark Zuckerberg", "Satya Nadella"],
            "topic": "AI",
        }))
        assert intent == Intent(
            category=Category.CEO_COMMENTS,
            companies=("Meta", "Microsoft"),
            ceos=("Mark Zuckerberg", "Satya Nadella"),
            topic="AI",
        )

    def test_ceos_and_topic_optional(self):
        intent = parse_intent('{"category": "Earnings Summary", "companies": ["Spotify"]}')
        assert intent.ceos is None
        assert intent.topic == ""

    def test_null_ceos_treated_as_absent(self):
        intent = parse_intent(
            '{"category": "General Inquiry", "companies": [], "ceos": null, "topic": null}'
        )
        assert intent.ceos is None
        assert intent.topic == ""

    def test_markdown_fence_is_stripped(self):
        raw = '```json\n{"category": "Mixed Query", "companies": ["Apple"], "topic": "x"}\n```'
        assert parse_intent(raw).category is Category.MIXED_QUERY

    def test_every_category_value_is_accepted(self):
        for category in Category:
            raw = json.dumps({"category": category.value, "companies": []})
            assert parse_intent(raw).category is category

    def test_unknown_category_rejected(self):
        with pytest.raises(ClassificationError, match="Unrecognized category"):
            parse_intent('{"category": "Unknown", "companies": ["Apple"]}')

    def test_non_string_category_rejected(self):
        with pytest.raises(ClassificationError):
            parse_intent('{"category": ["CEO Comments"], "companies": []}')

    def test_missing_companies_rejected(self):
        with pytest.raises(ClassificationError, match="companies"):
            parse_intent('{"category": "Earnings Summary", "topic": "x"}')

    def test_invalid_json_rejected(self):
        with pytest.raises(ClassificationError, match="invalid JSON"):
            parse_intent("The category is Earnings Summary")

    def test_non_object_rejected(self):
        with pytest.raises(ClassificationError):
            parse_intent('["Earnings Summary"]')

    def test_intent_is_immutable(self):
        intent = parse_intent('{"category": "Earnings Summary", "companies": ["Spotify"]}')
        with pytest.raises(ValidationError):
            intent.topic = "changed"


# ---------------------------------------------------------------------------
# Test: classify
# ---------------------------------------------------------------------------


class TestClassify:
    def test_sends_prompt_and_categories(self):
        llm = _llm_returning(
            '{"category": "Earnings Summary", "companies": ["Spotify"], '
            '"topic": "latest earnings call"}'
        )
        intent = _run(classify("Summarize Spotify's latest conference call", llm))

        assert intent.category is Category.EARNINGS_SUMMARY
        assert intent.companies == ("Spotify",)

        call_kwargs = llm.complete.call_args.kwargs
        assert "Summarize Spotify's latest conference call" in (
            call_kwargs["messages"][0]["content"]
        )
        for category in Category:
            assert category.value in call_kwargs["system"]

    def test_llm_failure_is_classification_error(self):
        llm = AsyncMock()
        llm.complete.side_effect = RuntimeError("rate limited")
        with pytest.raises(ClassificationError, match="rate limited"):
            _run(classify("anything", llm))

    def test_unknown_category_is_not_retried(self):
        llm = _llm_returning('{"category": "Unknown", "companies": []}')
        with pytest.raises(ClassificationError):
            _run(classify("anything", llm))
        llm.complete.assert_awaited_once()
