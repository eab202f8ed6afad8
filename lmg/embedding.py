"""Semantic embedding of a video for search (OpenAI embeddings API)."""

from __future__ import annotations

import logging
import math
from typing import Protocol

from openai import OpenAI

from lmg.jobs.models import VideoJob
from lmg.schemas.materials import MetadataArtifact

logger = logging.getLogger(__name__)

TRANSCRIPT_CONTEXT_CHARS = 1000


class EmbeddingProvider(Protocol):
    def embed(self, text: str) -> list[float]: ...


def l2_normalize(vector: list[float]) -> list[float]:
    norm = math.sqrt(sum(v * v for v in vector))
    if norm == 0:
        return list(vector)
    return [v / norm for v in vector]


class OpenAIEmbeddingProvider:
    """OpenAI embeddings, truncated to ``dimensions`` and L2-normalised."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        timeout: float = 60.0,
    ):
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model
        self._dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        response = self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self._dimensions,
        )
        vector = list(response.data[0].embedding)
        if len(vector) != self._dimensions:
            raise ValueError(
                f"Embedding has {len(vector)} dimensions, expected {self._dimensions}"
            )
        return l2_normalize(vector)


def build_embedding_context(source: VideoJob | MetadataArtifact, transcript: str) -> str:
    """Text to embed: title, category, summary and tags, then the start of the transcript."""
    parts = [
        f"Title: {source.title}",
        f"Category: {source.category}",
        f"Summary: {source.summary}",
        f"Tags: {', '.join(source.tags)}",
        f"Content: {transcript[:TRANSCRIPT_CONTEXT_CHARS]}",
    ]
    return "\n".join(parts)
