"""Video job records and their storage."""

from lmg.jobs.models import MaterialsStatus, ProcessingStatus, TranscriptSegment, VideoJob
from lmg.jobs.store import (
    FileVideoStore,
    JobNotFoundError,
    PostgresVideoStore,
    VideoStore,
    get_video_store,
    require_job,
)

__all__ = [
    "FileVideoStore",
    "JobNotFoundError",
    "MaterialsStatus",
    "PostgresVideoStore",
    "ProcessingStatus",
    "TranscriptSegment",
    "VideoJob",
    "VideoStore",
    "get_video_store",
    "require_job",
]
