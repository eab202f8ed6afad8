"""Idempotent persistence of a generated materials bundle."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from lmg.jobs.models import VideoJob
from lmg.jobs.store import VideoStore
from lmg.materials.store import ArtifactStore
from lmg.schemas.materials import (
    ArtifactKind,
    CaseStudyArtifact,
    ConceptMapArtifact,
    MaterialsBundle,
    kind_of,
)

logger = logging.getLogger(__name__)

GENERATED_BY = "retry-task"

# Kinds whose items get a default difficulty when the model left it out
_DIFFICULTY_KINDS = frozenset({ArtifactKind.FLASHCARDS, ArtifactKind.QUIZZES})


def case_study_id(job_id: str, index: int) -> str:
    """Stable case-study id: ``<video id>-problem-<n>`` (1-based)."""
    return f"{job_id}-problem-{index + 1}"


class MaterialsWriter:
    """Replace-all-for-job writer for artifacts, plus guarded metadata updates."""

    def __init__(self, video_store: VideoStore, artifact_store: ArtifactStore):
        self._videos = video_store
        self._artifacts = artifact_store

    def save(
        self,
        job: VideoJob,
        bundle: MaterialsBundle,
        metadata_generated: bool,
    ) -> dict[ArtifactKind, int]:
        """Persist every artifact kind present in ``bundle``; return items written per kind.

        For each kind the job's stored set is replaced as one unit: either
        every new item lands or the old set stays, and writing the same
        bundle twice never duplicates.
        Kinds with no items are left untouched. Job metadata is written only
        when ``metadata_generated`` is true; a selective retry that skipped
        metadata must not clobber the real title and summary.
        """
        written: dict[ArtifactKind, int] = {}
        generated_at = datetime.now(timezone.utc).isoformat()

        for kind, payload in bundle.artifacts.items():
            if kind is ArtifactKind.METADATA:
                continue
            items = self._items_for(job, payload, generated_at)
            if not items:
                logger.debug("No %s items for %s, keeping stored set", kind.value, job.job_id)
                continue
            removed, written[kind] = self._artifacts.replace_for_job(kind, job.job_id, items)
            logger.info(
                "Replaced %s for %s (%d removed, %d written)",
                kind.value, job.job_id, removed, written[kind],
            )

        metadata = bundle.metadata
        if metadata_generated and metadata is not None:
            self._videos.update_fields(
                job.job_id,
                {
                    "title": metadata.title,
                    "category": metadata.category,
                    "tags": list(metadata.tags),
                    "summary": metadata.summary,
                    "chapters": [c.model_dump(mode="json") for c in metadata.chapters],
                },
            )
            written[ArtifactKind.METADATA] = 1
            logger.info("Updated video metadata for %s (title: %s)", job.job_id, metadata.title)
        else:
            logger.info("Skipped video metadata update for %s, keeping existing values", job.job_id)

        return written

    def _items_for(self, job: VideoJob, payload: BaseModel, generated_at: str) -> list[dict[str, Any]]:
        kind = kind_of(payload)
        stamp = {
            "video_id": job.job_id,
            "user_id": job.user_id,
            "generation_type": "ai",
            "generated_by": GENERATED_BY,
            "generated_at": generated_at,
        }

        if isinstance(payload, ConceptMapArtifact):
            if not payload.nodes:
                return []
            body = payload.model_dump(mode="json", exclude={"kind"})
            return [{**body, **stamp}]

        items: list[dict[str, Any]] = []
        for idx, item in enumerate(payload.items):
            data = item.model_dump(mode="json")
            if isinstance(payload, CaseStudyArtifact):
                data["id"] = case_study_id(job.job_id, idx)
            if kind in _DIFFICULTY_KINDS and not data.get("difficulty"):
                data["difficulty"] = "medium"
            items.append({**data, **stamp})
        return items
