"""Pytest configuration and shared fixtures."""

import pytest

from lmg.jobs.models import ProcessingStatus, TranscriptSegment, VideoJob
from lmg.jobs.store import FileVideoStore
from lmg.materials.store import FileArtifactStore


@pytest.fixture
def video_store(tmp_path):
    return FileVideoStore(tmp_path / "jobs")


@pytest.fixture
def artifact_store(tmp_path):
    return FileArtifactStore(tmp_path / "artifacts")


@pytest.fixture
def make_job(video_store):
    """Create and store a job stuck in completed_with_warning."""

    def _make(job_id="vid-1", error_type=None, incomplete=None, **overrides):
        fields = {
            "job_id": job_id,
            "user_id": "user-1",
            "transcript": [
                TranscriptSegment(text="A binary search tree keeps keys in order.", offset=0.0),
                TranscriptSegment(text="Rotations keep it balanced.", offset=4.2),
            ],
            "processing_status": ProcessingStatus.COMPLETED_WITH_WARNING,
            "error_type": error_type,
            "incomplete_materials": list(incomplete or []),
        }
        fields.update(overrides)
        return video_store.create(VideoJob(**fields))

    return _make
