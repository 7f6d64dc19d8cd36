"""LLM provider protocol: the one text-generation call narrative insights need."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o",
}


@dataclass
class ProviderResponse:
    """Text returned by a provider, with token usage and timing."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
    timeout: float | None = None,
) -> LLMProvider:
    """Build the insight provider named in settings.

    Args:
        provider_name: "anthropic", "openai", or "mock".
        api_key: API key for the hosted providers.
        model: Model identifier; empty selects the provider default.
        timeout: Seconds to wait for a response before the request fails.

    Raises:
        ValueError: For an unknown provider name.
    """
    if provider_name == "mock":
        from cardiotrack.core.llm.providers.mock import MockProvider

        return MockProvider()
    if provider_name not in DEFAULT_MODELS:
        raise ValueError(f"Unknown LLM provider: {provider_name}")

    model = model or DEFAULT_MODELS[provider_name]
    if provider_name == "anthropic":
        from cardiotrack.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model, timeout=timeout)

    from cardiotrack.core.llm.providers.openai import OpenAIProvider

    return OpenAIProvider(api_key=api_key, model=model, timeout=timeout)
