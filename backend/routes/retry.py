"""Retry API: trigger a retry pass and inspect a single video job.

POST /api/tasks/retry-failed-videos
  → Runs one coordinator pass and returns its summary (camelCase keys).

GET /api/videos/{job_id}/status
  → Processing state, incomplete materials and last error of one job.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from lmg.jobs.store import JobNotFoundError, VideoStore, get_video_store, require_job
from lmg.retry.coordinator import RetryCoordinator
from lmg.retry.factory import build_coordinator

logger = logging.getLogger(__name__)
router = APIRouter()


class VideoStatusResponse(BaseModel):
    job_id: str
    processing_status: str
    materials_status: str
    incomplete_materials: list[str] = []
    error_type: str | None = None
    error_message: str | None = None
    has_embedding: bool = False
    title: str = ""
    processed_at: datetime | None = None
    updated_at: datetime | None = None


_coordinator: RetryCoordinator | None = None


def get_coordinator() -> RetryCoordinator:
    """Return the process-wide coordinator, so runs abandoned by one pass stay visible to the next."""
    global _coordinator
    if _coordinator is None:
        try:
            _coordinator = build_coordinator()
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _coordinator


def get_store() -> VideoStore:
    return get_video_store()


@router.post("/tasks/retry-failed-videos")
def retry_failed_videos(coordinator: RetryCoordinator = Depends(get_coordinator)) -> dict:
    """Run one retry pass synchronously (blocks up to the per-job timeout)."""
    summary = coordinator.run()
    logger.info(
        "Retry pass via API: found=%d success=%d pending=%d",
        summary.videos_found,
        summary.successful_retries,
        summary.still_pending,
    )
    return summary.to_json_dict()


@router.get("/videos/{job_id}/status", response_model=VideoStatusResponse)
def video_status(job_id: str, store: VideoStore = Depends(get_store)):
    try:
        job = require_job(store, job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return VideoStatusResponse(
        job_id=job.job_id,
        processing_status=job.processing_status.value,
        materials_status=job.materials_status.value,
        incomplete_materials=job.incomplete_materials,
        error_type=job.error_type,
        error_message=job.error_message,
        has_embedding=job.has_embedding,
        title=job.title,
        processed_at=job.processed_at,
        updated_at=job.updated_at,
    )
