"""Build a ready-to-run processor and coordinator from settings."""

from __future__ import annotations

import logging

from lmg.config import Settings, get_settings
from lmg.embedding import OpenAIEmbeddingProvider
from lmg.generation.provider import MaterialsGenerator
from lmg.jobs.store import get_video_store
from lmg.llm import get_provider
from lmg.materials.store import get_artifact_store
from lmg.retry.coordinator import RetryCoordinator
from lmg.retry.processor import JobProcessor

logger = logging.getLogger(__name__)


def build_processor(settings: Settings | None = None, provider_name: str | None = None) -> JobProcessor:
    """Wire the configured LLM, embedder and stores into a :class:`JobProcessor`.

    Raises ValueError when the chosen provider has no API key.
    """
    settings = settings or get_settings()
    name, api_key, model = settings.llm_credentials(provider_name)
    if not api_key:
        raise ValueError(f"API key not configured for provider '{name}'.")
    llm = get_provider(name, api_key=api_key, model=model)

    embedder = None
    if settings.openai_api_key:
        embedder = OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            model=settings.lmg_embedding_model,
            dimensions=settings.lmg_embedding_dimensions,
        )
    else:
        logger.warning("OPENAI_API_KEY not set, embeddings will not be generated")

    return JobProcessor(
        video_store=get_video_store(),
        artifact_store=get_artifact_store(),
        generator=MaterialsGenerator(llm),
        embedder=embedder,
        chunk_workers=settings.lmg_chunk_workers,
    )


def build_coordinator(settings: Settings | None = None, provider_name: str | None = None) -> RetryCoordinator:
    settings = settings or get_settings()
    return RetryCoordinator(
        video_store=get_video_store(),
        processor=build_processor(settings, provider_name),
        concurrency=settings.lmg_retry_concurrency,
        job_timeout=settings.lmg_job_timeout_seconds,
    )
