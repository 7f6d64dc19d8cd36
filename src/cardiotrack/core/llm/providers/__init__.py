"""LLM provider implementations."""

from cardiotrack.core.llm.providers.anthropic import AnthropicProvider
from cardiotrack.core.llm.providers.mock import MockProvider
from cardiotrack.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
