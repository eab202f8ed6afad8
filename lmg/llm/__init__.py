"""LLM adapter layer: OpenAI and Anthropic behind a common protocol."""

from lmg.llm.anthropic_provider import AnthropicProvider
from lmg.llm.base import LLMProvider, StructuredCompletion, StructuredOutputError
from lmg.llm.openai_provider import OpenAIProvider


def get_provider(provider_name: str, **kwargs: object) -> LLMProvider:
    """Return the configured LLM provider. provider_name: 'openai' | 'anthropic'."""
    if provider_name.lower() == "anthropic":
        return AnthropicProvider(**kwargs)
    return OpenAIProvider(**kwargs)


__all__ = [
    "AnthropicProvider",
    "LLMProvider",
    "OpenAIProvider",
    "StructuredCompletion",
    "StructuredOutputError",
    "get_provider",
]
