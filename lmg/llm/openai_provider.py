"""OpenAI LLM implementation with structured output via JSON in prompt."""

from typing import Any

from openai import OpenAI
from pydantic import BaseModel

from lmg.llm.base import StructuredCompletion, parse_structured
from lmg.schemas.materials import TokenUsage


class OpenAIProvider:
    """OpenAI chat completion with optional structured (JSON) output."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
    ):
        # max_retries=0: retries belong to the coordinator's next pass
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    def _create(self, prompt: str, **kwargs: Any):
        return self._client.chat.completions.create(
            model=kwargs.get("model") or self._model,
            messages=[{"role": "user", "content": prompt}],
            **{k: v for k, v in kwargs.items() if k not in ("model",)},
        )

    def complete(self, prompt: str, **kwargs: Any) -> str:
        # OpenAI exceptions propagate as-is; callers classify them by message
        response = self._create(prompt, **kwargs)
        return response.choices[0].message.content or ""

    def complete_structured(self, prompt: str, schema: type[BaseModel], **kwargs: Any) -> StructuredCompletion:
        instruction = (
            "Respond with a single JSON object only. No markdown, no code fence, no explanation."
        )
        response = self._create(
            f"{prompt}\n\n{instruction}",
            response_format={"type": "json_object"},
            **kwargs,
        )
        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise RuntimeError("Model stopped at the output token limit")
        if choice.finish_reason == "content_filter":
            raise RuntimeError("Response blocked by the safety filter")
        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        data = parse_structured(choice.message.content or "", schema)
        return StructuredCompletion(data=data, usage=usage)
