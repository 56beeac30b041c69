# =============================================================================
# Synthesis Gateway — Evidence + Prompt → Final Answer
# =============================================================================
#
# Two entry points, chosen by category in the orchestrator:
#
#   summarize() — Earnings Summary: summarise one transcript for the user
#   extract()   — every other category: pull the parts of the evidence that
#                 answer the prompt (metrics-specific instructions for
#                 Financial Metrics)
#
# Evidence may be an empty string; the prompts tell the model to say so
# instead of inventing facts. Any LLM failure raises SynthesisError.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from earnings_qa.errors import SynthesisError
from earnings_qa.services.llm import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """Final answer plus usage metrics from the synthesis call."""

    answer: str
    model: str
    input_tokens: int
    output_tokens: int


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_PLAIN_TEXT_RULES = (
    "Format the response as plain text with clear section headers and "
    "structured paragraphs. Do not use Markdown symbols such as asterisks "
    "or dashes for emphasis or bullet points. Write 'Revenue: $124.3 "
    "billion', not '**Revenue**' or '- Revenue'."
)

_NO_DATA_RULE = (
    "If the provided data is empty or does not contain the answer, say that "
    "the information is not available in the retrieved documents. Never "
    "invent figures or quotes."
)

SUMMARIZE_SYSTEM = (
    "You are a financial analyst who writes concise, accurate summaries of "
    "earnings calls. Cover every key point of the call without truncating "
    "and never stop mid-sentence.\n\n"
    f"{_PLAIN_TEXT_RULES}\n\n{_NO_DATA_RULE}"
)

EXTRACT_SYSTEM = (
    "You are a financial analyst who answers questions using earnings call "
    "transcripts and financial statements. Quote or paraphrase management "
    "accurately and attribute each statement to the company it came from.\n\n"
    f"{_PLAIN_TEXT_RULES}\n\n{_NO_DATA_RULE}"
)


def _summarize_user_prompt(prompt: str, content: str) -> str:
    return (
        f"{prompt}\n\nData to summarize:\n{content}\n\n"
        "Please provide a full summary of the provided data, ensuring all "
        "relevant information is included without truncation."
    )


def _extract_user_prompt(prompt: str, topic: str, content: str) -> str:
    return (
        f"Question: {prompt}\nTopic: {topic}\n\n"
        f"Transcripts:\n{content}\n\n"
        "Extract the comments and facts relevant to the topic and answer the "
        "question. Group them by company and speaker where possible."
    )


def _metrics_user_prompt(prompt: str, content: str) -> str:
    return (
        f"Question: {prompt}\n\n"
        f"Financial data and transcript:\n{content}\n\n"
        "Answer the question with the specific figures from the data above, "
        "stating the reporting period for each figure. Use the transcript "
        "for operational numbers that the statements do not carry."
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def summarize(
    evidence: str,
    prompt: str,
    llm: LLMProvider,
) -> SynthesisResult:
    """Summarise a transcript (Earnings Summary)."""
    return await _complete(
        llm,
        system=SUMMARIZE_SYSTEM,
        user=_summarize_user_prompt(prompt, evidence),
        label="summarize",
    )


async def extract(
    evidence: Sequence[str],
    topic: str,
    category: str,
    prompt: str,
    llm: LLMProvider,
) -> SynthesisResult:
    """Answer a non-summary prompt from one or more evidence strings."""
    combined = "\n\n".join(evidence)
    if category == "Financial Metrics":
        user = _metrics_user_prompt(prompt, combined)
    else:
        user = _extract_user_prompt(prompt, topic, combined)
    return await _complete(llm, system=EXTRACT_SYSTEM, user=user, label="extract")


def build_request_framing(
    prompt: str,
    category: str,
    topic: str,
    ceos: Sequence[str] | None = None,
) -> str:
    """
    The request description handed to summarize() in place of the bare prompt.

    Example:
        Prompt: Summarize Spotify's latest conference call
        Category: Earnings Summary
        Topic: earnings call
    """
    lines = [f"Prompt: {prompt}", f"Category: {category}"]
    if ceos:
        lines.append(f"CEOs: {', '.join(ceos)}")
    lines.append(f"Topic: {topic}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


async def _complete(
    llm: LLMProvider, system: str, user: str, label: str,
) -> SynthesisResult:
    logger.info("Synthesis (%s): sending %d chars", label, len(user))
    try:
        response: LLMResponse = await llm.complete(
            messages=[{"role": "user", "content": user}],
            system=system,
        )
    except Exception as e:
        logger.error("Synthesis LLM call failed: %s", e)
        raise SynthesisError(f"LLM call failed: {e}") from e

    logger.info(
        "Synthesis complete: model=%s, tokens=%d+%d",
        response.model, response.input_tokens, response.output_tokens,
    )
    return SynthesisResult(
        answer=response.content,
        model=response.model,
        input_tokens=response.input_tokens,
        output_tokens=response.output_tokens,
    )
