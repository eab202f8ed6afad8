"""Video job record and its status enums."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from lmg.errors.kinds import UNKNOWN_ERROR_TYPE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    COMPLETED_WITH_WARNING = "completed_with_warning"
    FAILED = "failed"


class MaterialsStatus(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class TranscriptSegment(BaseModel):
    text: str
    offset: float = 0.0
    duration: float = 0.0
    lang: str = "en"


class VideoJob(BaseModel):
    """One transcript-to-materials job, keyed by the external video id."""

    job_id: str
    user_id: str = ""
    transcript: list[TranscriptSegment] = Field(default_factory=list)
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    materials_status: MaterialsStatus = MaterialsStatus.INCOMPLETE
    incomplete_materials: list[str] = Field(default_factory=list)
    error_type: str | None = None
    error_message: str | None = None
    embedding: list[float] | None = None

    # Written by the materials writer when metadata is (re)generated
    title: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    summary: str = ""
    chapters: list[dict[str, Any]] = Field(default_factory=list)

    processed_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def effective_error_type(self) -> str:
        return self.error_type or UNKNOWN_ERROR_TYPE

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def transcript_text(self) -> str:
        return " ".join(s.text for s in self.transcript)


# Fields a partial update may touch
UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "processing_status",
    "materials_status",
    "incomplete_materials",
    "error_type",
    "error_message",
    "embedding",
    "title",
    "category",
    "tags",
    "summary",
    "chapters",
    "processed_at",
})
