# =============================================================================
# Multi-Provider LLM Abstraction
# =============================================================================
#
# Common interface for chat completions used by the intent classifier and
# the synthesis gateway, with implementations for OpenAI-compatible APIs
# (OpenAI, DeepSeek, Qwen, ...) and Anthropic (Claude).
#
# Both callers only ever send one system instruction plus one user
# instruction and read back free text, so the interface is a single
# `complete()` coroutine.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── OpenAICompatibleProvider — system prompt as a message role
#   ├── AnthropicProvider        — system prompt as top-level kwarg
#   └── create_llm_provider()    — factory, reads provider type from Settings
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from earnings_qa.config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """
    Standardised response from any LLM provider.

    Normalises the Anthropic and OpenAI response shapes into one structure.
    """

    content: str           # The generated text, stripped of surrounding whitespace
    model: str             # Model identifier (e.g., "gpt-4o-mini")
    input_tokens: int      # Tokens consumed by the prompt
    output_tokens: int     # Tokens generated in the response


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """Protocol every LLM provider implements."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            messages: Conversation messages as dicts with "role" and "content".
                Roles: "user", "assistant" (no "system" — use the system param).
            system: System instruction for the model.
            temperature: Override sampling temperature (default from config).
            max_tokens: Override max output tokens (default from config).

        Returns:
            LLMResponse with generated text and usage metrics.
        """
        ...


# ---------------------------------------------------------------------------
# Implementation 1: OpenAI-Compatible
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Provider for OpenAI and any API that follows the OpenAI chat spec.

    Point it at another host with:
        LLM_PROVIDER=openai_compatible
        LLM_BASE_URL=https://api.deepseek.com/v1
        LLM_API_KEY=your-key
        LLM_MODEL=deepseek-chat
    """

    def __init__(self, settings: Settings) -> None:
        from openai import AsyncOpenAI

        resolved_key = settings.llm_api_key or settings.openai_api_key
        if not resolved_key:
            raise ValueError(
                "No API key configured for OpenAI-compatible provider. "
                "Set LLM_API_KEY or OPENAI_API_KEY in .env"
            )

        client_kwargs: dict = {"api_key": resolved_key}
        if settings.llm_base_url:
            client_kwargs["base_url"] = settings.llm_base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = settings.llm_model
        self._temperature = settings.llm_temperature
        self._max_tokens = settings.llm_max_tokens

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            settings.llm_base_url or "https://api.openai.com/v1",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion using an OpenAI-compatible API."""
        all_messages: list[dict[str, str]] = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=all_messages,
            max_tokens=max_tokens if max_tokens is not None else self._max_tokens,
            temperature=(
                temperature if temperature is not None else self._temperature
            ),
        )

        content = (response.choices[0].message.content or "").strip()

        usage = response.usage
        return LLMResponse(
            content=content,
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# ---------------------------------------------------------------------------
# Implementation 2: Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """
    Anthropic Claude provider using the native SDK.

    Anthropic takes the system prompt as a top-level `system=` kwarg,
    not as a message with role "system".
    """

    def __init__(self, settings: Settings) -> None:
        from anthropic import AsyncAnthropic

        resolved_key = settings.llm_api_key or settings.anthropic_api_key
        if not resolved_key:
            raise ValueError(
                "No Anthropic API key configured. Set LLM_API_KEY or "
                "ANTHROPIC_API_KEY in .env"
            )

        self._client = AsyncAnthropic(api_key=resolved_key)
        self._model = settings.llm_model
        self._temperature = settings.llm_temperature
        self._max_tokens = settings.llm_max_tokens

        logger.info("Initialized AnthropicProvider (model=%s)", self._model)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens if max_tokens is not None else self._max_tokens,
            "temperature": (
                temperature if temperature is not None else self._temperature
            ),
        }
        if system:
            kwargs["system"] = system

        response = await self._client.messages.create(**kwargs)

        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text
                break

        return LLMResponse(
            content=content.strip(),
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

_KNOWN_PROVIDER_TYPES = {"anthropic", "openai_compatible"}


def create_llm_provider(
    settings: Settings,
) -> OpenAICompatibleProvider | AnthropicProvider:
    """
    Build the provider selected by `settings.llm_provider`.

    The SDK clients pool their own connections, so callers build one
    provider at start-up and reuse it for every request.

    Raises:
        ValueError: Unknown provider type or missing API key.
    """
    if settings.llm_provider not in _KNOWN_PROVIDER_TYPES:
        raise ValueError(
            f"Unknown provider type '{settings.llm_provider}'. "
            f"Supported types: {sorted(_KNOWN_PROVIDER_TYPES)}"
        )

    if settings.llm_provider == "anthropic":
        return AnthropicProvider(settings)
    return OpenAICompatibleProvider(settings)
