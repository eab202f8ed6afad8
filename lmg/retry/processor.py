"""Reprocess one video job according to the kind of failure it last hit.

Permanent kinds fail the job outright, chunking kinds regenerate only the
missing artifacts one call at a time, and everything else gets one more
full-transcript attempt. Store failures propagate and leave the job as it
was, so the next coordinator pass sees it again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from lmg.embedding import EmbeddingProvider, build_embedding_context
from lmg.errors.classifier import classify_error
from lmg.errors.policy import is_permanent, requires_chunking
from lmg.generation.chunked import ChunkedGenerator
from lmg.generation.provider import MaterialsGenerator
from lmg.jobs.models import MaterialsStatus, ProcessingStatus, VideoJob
from lmg.jobs.store import VideoStore
from lmg.materials.store import ArtifactStore
from lmg.materials.writer import MaterialsWriter
from lmg.schemas.materials import MetadataArtifact

logger = logging.getLogger(__name__)

TRANSCRIPT_UNAVAILABLE = "TRANSCRIPT_UNAVAILABLE"


class ProcessStatus(str, Enum):
    SKIPPED = "skipped"
    PERMANENT_FAILURE = "permanent_failure"
    CHUNKED_PROCESSING = "chunked_processing"
    STANDARD_RETRY = "standard_retry"


@dataclass
class ProcessResult:
    job_id: str
    status: ProcessStatus
    success: bool
    error_type: str
    incomplete_materials: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobProcessor:
    def __init__(
        self,
        video_store: VideoStore,
        artifact_store: ArtifactStore,
        generator: MaterialsGenerator,
        embedder: EmbeddingProvider | None = None,
        chunk_workers: int = 1,
    ):
        self._videos = video_store
        self._writer = MaterialsWriter(video_store, artifact_store)
        self._generator = generator
        self._chunked = ChunkedGenerator(generator, max_workers=chunk_workers)
        self._embedder = embedder

    def process(self, job: VideoJob) -> ProcessResult:
        error_type = job.effective_error_type
        if job.processing_status != ProcessingStatus.COMPLETED_WITH_WARNING:
            logger.info("Skipping %s: status is %s", job.job_id, job.processing_status.value)
            return ProcessResult(job.job_id, ProcessStatus.SKIPPED, False, error_type)

        if is_permanent(error_type):
            return self._fail_permanently(job, error_type)
        if not job.transcript_text().strip():
            return self._fail_permanently(job, TRANSCRIPT_UNAVAILABLE, "Job has no transcript text")
        if requires_chunking(error_type):
            return self.process_chunked(job)
        return self.process_standard(job)

    def _fail_permanently(
        self, job: VideoJob, error_type: str, error_message: str | None = None
    ) -> ProcessResult:
        logger.info("Permanent failure for %s (%s), not retrying", job.job_id, error_type)
        self._videos.update_fields(
            job.job_id,
            {
                "processing_status": ProcessingStatus.FAILED,
                "error_type": error_type,
                "error_message": error_message or job.error_message,
            },
        )
        return ProcessResult(job.job_id, ProcessStatus.PERMANENT_FAILURE, False, error_type)

    def process_chunked(self, job: VideoJob) -> ProcessResult:
        """Regenerate the job's incomplete artifacts (all of them when none are recorded)."""
        error_type = job.effective_error_type
        logger.info(
            "Chunked generation for %s (%s), targets: %s",
            job.job_id, error_type, ", ".join(job.incomplete_materials) or "all",
        )
        transcript = job.transcript_text()
        result = self._chunked.generate(transcript, only=job.incomplete_materials)
        self._writer.save(job, result.materials, result.metadata_generated)

        embedding = self._ensure_embedding(job, result.materials.metadata, transcript)
        incomplete = [k.value for k in result.incomplete_materials]
        if not incomplete:
            fields: dict[str, Any] = self._completed_fields()
        else:
            fields = {
                "processing_status": ProcessingStatus.COMPLETED_WITH_WARNING,
                "materials_status": MaterialsStatus.INCOMPLETE,
                "incomplete_materials": incomplete,
            }
        if embedding is not None:
            fields["embedding"] = embedding
        self._videos.update_fields(job.job_id, fields)

        if incomplete:
            logger.warning("%s partially completed, incomplete: %s", job.job_id, ", ".join(incomplete))
        else:
            logger.info("%s completed with chunked generation", job.job_id)
        return ProcessResult(
            job.job_id,
            ProcessStatus.CHUNKED_PROCESSING,
            not incomplete,
            error_type,
            incomplete_materials=incomplete,
        )

    def process_standard(self, job: VideoJob) -> ProcessResult:
        """One more full-transcript attempt; a failure propagates with the job untouched."""
        error_type = job.effective_error_type
        transcript = job.transcript_text()
        logger.info("Standard retry for %s (%s), %d transcript chars", job.job_id, error_type, len(transcript))
        try:
            generated = self._generator.generate(transcript)
        except Exception as e:
            failure = classify_error(e)
            logger.warning(
                "Standard retry failed for %s (%s): %s",
                job.job_id, failure.kind.value, failure.message,
            )
            raise

        self._writer.save(job, generated.materials, metadata_generated=True)
        embedding = self._ensure_embedding(job, generated.materials.metadata, transcript, force=True)
        fields = self._completed_fields()
        if embedding is not None:
            fields["embedding"] = embedding
        self._videos.update_fields(job.job_id, fields)
        logger.info("%s standard retry succeeded (%s tokens)", job.job_id, generated.usage.total_tokens)
        return ProcessResult(job.job_id, ProcessStatus.STANDARD_RETRY, True, error_type)

    @staticmethod
    def _completed_fields() -> dict[str, Any]:
        return {
            "processing_status": ProcessingStatus.COMPLETED,
            "materials_status": MaterialsStatus.COMPLETE,
            "incomplete_materials": [],
            "error_type": None,
            "error_message": None,
            "processed_at": _utcnow(),
        }

    def _ensure_embedding(
        self,
        job: VideoJob,
        metadata: MetadataArtifact | None,
        transcript: str,
        force: bool = False,
    ) -> list[float] | None:
        """Embed the video when it has no embedding yet (or on ``force``). Never raises."""
        if self._embedder is None:
            return None
        if job.has_embedding and not force:
            logger.debug("Keeping existing embedding for %s (%d dims)", job.job_id, len(job.embedding or []))
            return None
        context = build_embedding_context(metadata or job, transcript)
        try:
            vector = self._embedder.embed(context)
        except Exception as e:
            logger.warning("Embedding failed for %s (will retry next pass): %s", job.job_id, e)
            return None
        logger.info("Generated %d-dim embedding for %s", len(vector), job.job_id)
        return vector
