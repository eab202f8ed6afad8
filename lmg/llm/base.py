"""Abstract LLM provider protocol and shared structured-output parsing."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from lmg.schemas.materials import TokenUsage


class StructuredOutputError(ValueError):
    """The model answered, but not with JSON matching the requested schema.

    The message deliberately avoids echoing the model output: failure
    classification runs on message text and this is a transient failure.
    """


@dataclass
class StructuredCompletion:
    data: BaseModel
    usage: TokenUsage = field(default_factory=TokenUsage)


class LLMProvider(Protocol):
    """Protocol for LLM backends (OpenAI, Anthropic)."""

    def complete(self, prompt: str, **kwargs: Any) -> str:
        """Return raw text completion."""
        ...

    def complete_structured(self, prompt: str, schema: type[BaseModel], **kwargs: Any) -> StructuredCompletion:
        """Return completion parsed into the given Pydantic model (JSON), with token usage."""
        ...


def strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```\s*$", "", text)
    return text.strip()


def parse_structured(raw: str, schema: type[BaseModel]) -> BaseModel:
    """Parse a raw completion into ``schema``; raise StructuredOutputError otherwise."""
    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise StructuredOutputError(
            f"Model output for {schema.__name__} is not JSON (line {e.lineno}, column {e.colno})"
        ) from e
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise StructuredOutputError(
            f"Model output did not match {schema.__name__} ({e.error_count()} field errors)"
        ) from e
