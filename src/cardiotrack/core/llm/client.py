"""LLM client: one guarded text-generation call on top of a provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cardiotrack.core.llm.guardrails import check_guardrails, sanitize_content
from cardiotrack.core.llm.provider import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Guarded response from the insight LLM."""

    content: str
    model: str
    guardrail_flags: list[str] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=dict)


class LLMClient:
    """Invokes a provider and redacts prohibited phrasing from its output."""

    def __init__(self, provider: LLMProvider, provider_name: str = "mock") -> None:
        self.provider = provider
        self.provider_name = provider_name

    async def invoke(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """Call the provider. Provider exceptions propagate to the caller."""
        provider_response: ProviderResponse = await self.provider.generate(
            system_message=system_message,
            user_message=user_message,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        logger.info(
            "LLM call: provider=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            self.provider_name,
            provider_response.model,
            provider_response.input_tokens,
            provider_response.output_tokens,
            provider_response.latency_ms,
        )

        check = check_guardrails(provider_response.content)
        return LLMResponse(
            content=sanitize_content(provider_response.content, check),
            model=provider_response.model,
            guardrail_flags=check.flags,
            usage={
                "input_tokens": provider_response.input_tokens,
                "output_tokens": provider_response.output_tokens,
            },
        )
