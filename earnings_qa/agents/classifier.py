# =============================================================================
# Intent Classifier — Prompt → Structured Intent
# =============================================================================
#
# Sends the raw user prompt to the LLM together with the closed list of
# categories and parses the JSON object it returns:
#
#   { "category": str, "companies": [str], "ceos": [str]?, "topic": str }
#
# The category set is closed. "Mixed Query" covers prompts that combine
# intents (e.g. a summary plus management comments) so they are not forced
# into a single wrong bucket.
#
# FAILURE: LLM errors, non-JSON output, missing `category` / `companies`, or
# a category outside the enum raise ClassificationError. There is no retry
# and no fallback category; the request is aborted.
# =============================================================================

from __future__ import annotations

import json
import logging
import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError

from earnings_qa.errors import ClassificationError
from earnings_qa.services.llm import LLMProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


class Category(str, Enum):
    """Closed set of prompt categories. Values are the wire strings."""

    COMPANY_INFO = "Company Info"
    CEO_COMMENTS = "CEO Comments"
    EARNINGS_SUMMARY = "Earnings Summary"
    FINANCIAL_METRICS = "Financial Metrics"
    GENERAL_INQUIRY = "General Inquiry"
    MIXED_QUERY = "Mixed Query"


class Intent(BaseModel):
    """Structured classification of one prompt. Immutable once built."""

    category: Category
    companies: tuple[str, ...]
    ceos: tuple[str, ...] | None = None
    topic: str = ""

    model_config = ConfigDict(frozen=True)


_CATEGORY_VALUES = frozenset(c.value for c in Category)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_CLASSIFIER_SYSTEM = """You categorize questions about public companies.

Assign the prompt to exactly one of these categories: {categories}.

Respond with ONLY a JSON object (no markdown, no explanation):
{{
  "category": "<one of the categories above>",
  "companies": ["<company name>", ...],
  "ceos": ["<executive name>", ...],
  "topic": "<short topic of the question>"
}}

Guidelines:
- For each company, return the parent company's name (e.g. "Meta" for \
Facebook or Instagram, "Alphabet" for Google).
- Omit "ceos" when no executives are named.
- "CEO Comments": statements by named executives, e.g. "What are Mark \
Zuckerberg's and Satya Nadella's recent comments about AI?"
- "Earnings Summary": summaries of a whole earnings call, e.g. \
"Summarize Spotify's latest conference call".
- "Financial Metrics": specific financial or operating figures, e.g. \
"How many new large deals did ServiceNow sign in the last quarter?"
- "Company Info": general facts about the company itself.
- "General Inquiry": broader questions that fit nothing else.
- "Mixed Query": prompts combining several intents (e.g. summary plus \
comments)."""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def classify(
    prompt: str,
    llm: LLMProvider,
    max_tokens: int | None = None,
) -> Intent:
    """
    Classify a user prompt into an Intent.

    Raises:
        ClassificationError: The LLM call failed or returned an unusable
            object (see module docstring).
    """
    system = _CLASSIFIER_SYSTEM.format(
        categories=", ".join(c.value for c in Category),
    )
    try:
        response = await llm.complete(
            messages=[{
                "role": "user",
                "content": (
                    "Categorize this prompt and return the full JSON "
                    f"object: {prompt}"
                ),
            }],
            system=system,
            max_tokens=max_tokens,
        )
    except Exception as e:
        logger.error("Classifier LLM call failed: %s", e)
        raise ClassificationError(f"Classifier call failed: {e}") from e

    intent = parse_intent(response.content)
    logger.info(
        "Categorized prompt: category=%s, companies=%s, ceos=%s, topic=%s",
        intent.category.value, list(intent.companies),
        list(intent.ceos) if intent.ceos else None, intent.topic,
    )
    return intent


def parse_intent(raw: str) -> Intent:
    """Parse the classifier's raw text output into an Intent."""
    text = raw.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ClassificationError(
            f"Classifier returned invalid JSON: {e.msg}"
        ) from e

    if not isinstance(payload, dict):
        raise ClassificationError("Classifier output is not a JSON object")

    category = payload.get("category")
    if not isinstance(category, str) or category not in _CATEGORY_VALUES:
        raise ClassificationError(f"Unrecognized category: {category}")

    # Some models emit "ceos": null or "topic": null instead of omitting them
    if payload.get("ceos") is None:
        payload.pop("ceos", None)
    if payload.get("topic") is None:
        payload.pop("topic", None)

    try:
        return Intent.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) for err in e.errors()
        )
        raise ClassificationError(
            f"Classifier output is malformed (fields: {fields})"
        ) from e
