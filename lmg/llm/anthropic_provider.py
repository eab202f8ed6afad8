"""Anthropic LLM implementation with structured output via JSON parse."""

from typing import Any

from anthropic import Anthropic
from pydantic import BaseModel

from lmg.llm.base import StructuredCompletion, parse_structured
from lmg.schemas.materials import TokenUsage


class AnthropicProvider:
    """Anthropic chat completion with optional structured (JSON) output."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-sonnet-20241022",
        timeout: float = 60.0,
    ):
        self._client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    def _create(self, prompt: str, **kwargs: Any):
        return self._client.messages.create(
            model=kwargs.get("model") or self._model,
            max_tokens=kwargs.get("max_tokens", 8192),
            messages=[{"role": "user", "content": prompt}],
        )

    def complete(self, prompt: str, **kwargs: Any) -> str:
        response = self._create(prompt, **kwargs)
        return response.content[0].text if response.content else ""

    def complete_structured(self, prompt: str, schema: type[BaseModel], **kwargs: Any) -> StructuredCompletion:
        instruction = (
            "Respond with a single JSON object that conforms to the schema. "
            "No markdown, no code fence, only raw JSON."
        )
        response = self._create(f"{prompt}\n\n{instruction}", **kwargs)
        if response.stop_reason == "max_tokens":
            raise RuntimeError("Model stopped at the output token limit")
        usage = TokenUsage(
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            total_tokens=response.usage.input_tokens + response.usage.output_tokens,
        )
        raw = response.content[0].text if response.content else ""
        return StructuredCompletion(data=parse_structured(raw, schema), usage=usage)
