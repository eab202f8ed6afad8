"""Tests for the file-backed video store and artifact store."""

import pytest

from lmg.jobs import FileVideoStore, JobNotFoundError, ProcessingStatus, VideoJob, require_job
from lmg.materials import FileArtifactStore
from lmg.schemas import ArtifactKind


class TestFileVideoStore:

    def test_create_and_get(self, video_store):
        video_store.create(VideoJob(job_id="abc", user_id="u1"))
        job = video_store.get("abc")
        assert job is not None
        assert job.user_id == "u1"
        assert job.processing_status == ProcessingStatus.PENDING
        assert video_store.get("missing") is None

    def test_survives_new_instance(self, tmp_path):
        FileVideoStore(tmp_path / "jobs").create(VideoJob(job_id="abc", title="Kept"))
        assert FileVideoStore(tmp_path / "jobs").get("abc").title == "Kept"

    def test_find_by_status(self, video_store, make_job):
        make_job("a")
        make_job("b")
        video_store.create(VideoJob(job_id="c", processing_status=ProcessingStatus.COMPLETED))
        found = video_store.find_by_status(ProcessingStatus.COMPLETED_WITH_WARNING)
        assert sorted(j.job_id for j in found) == ["a", "b"]

    def test_update_fields_is_partial(self, video_store, make_job):
        make_job("a", error_type="LLM_RATE_LIMIT")
        assert video_store.update_fields("a", {"title": "New title"})
        job = video_store.get("a")
        assert job.title == "New title"
        assert job.error_type == "LLM_RATE_LIMIT"
        assert len(job.transcript) == 2

    def test_update_fields_stores_enum_values(self, video_store, make_job):
        make_job("a")
        video_store.update_fields("a", {"processing_status": ProcessingStatus.FAILED})
        assert video_store.get("a").processing_status == ProcessingStatus.FAILED

    def test_conditional_update(self, video_store, make_job):
        make_job("a")
        video_store.update_fields("a", {"processing_status": ProcessingStatus.COMPLETED})
        applied = video_store.update_fields(
            "a",
            {"error_type": "LLM_TIMEOUT"},
            only_if_status=ProcessingStatus.COMPLETED_WITH_WARNING,
        )
        assert applied is False
        assert video_store.get("a").error_type is None

    def test_update_unknown_field_rejected(self, video_store, make_job):
        make_job("a")
        with pytest.raises(ValueError, match="Cannot update job fields"):
            video_store.update_fields("a", {"job_id": "b"})

    def test_update_missing_job(self, video_store):
        assert video_store.update_fields("nope", {"title": "x"}) is False

    def test_require_job(self, video_store, make_job):
        make_job("a")
        assert require_job(video_store, "a").job_id == "a"
        with pytest.raises(JobNotFoundError):
            require_job(video_store, "b")


class TestFileArtifactStore:

    def test_insert_and_delete(self, artifact_store):
        items = [{"video_id": "v1", "question": "Q1"}, {"video_id": "v1", "question": "Q2"}]
        assert artifact_store.insert_many(ArtifactKind.FLASHCARDS, items) == 2
        assert len(artifact_store.list_for_job(ArtifactKind.FLASHCARDS, "v1")) == 2
        assert artifact_store.delete_all_for_job(ArtifactKind.FLASHCARDS, "v1") == 2
        assert artifact_store.list_for_job(ArtifactKind.FLASHCARDS, "v1") == []

    def test_jobs_and_kinds_are_isolated(self, artifact_store):
        artifact_store.insert_many(ArtifactKind.FLASHCARDS, [{"video_id": "v1"}])
        artifact_store.insert_many(ArtifactKind.QUIZZES, [{"video_id": "v1"}])
        artifact_store.insert_many(ArtifactKind.FLASHCARDS, [{"video_id": "v2"}])
        artifact_store.delete_all_for_job(ArtifactKind.FLASHCARDS, "v1")
        assert artifact_store.list_for_job(ArtifactKind.QUIZZES, "v1") == [{"video_id": "v1"}]
        assert artifact_store.list_for_job(ArtifactKind.FLASHCARDS, "v2") == [{"video_id": "v2"}]

    def test_item_without_owner_rejected(self, tmp_path):
        store = FileArtifactStore(tmp_path / "artifacts")
        with pytest.raises(ValueError, match="video_id"):
            store.insert_many(ArtifactKind.QUIZZES, [{"question_text": "orphan"}])

    def test_replace_for_job_swaps_the_whole_set(self, artifact_store):
        artifact_store.insert_many(ArtifactKind.FLASHCARDS, [{"video_id": "v1", "n": i} for i in range(4)])
        artifact_store.insert_many(ArtifactKind.FLASHCARDS, [{"video_id": "v2", "n": 0}])

        removed, written = artifact_store.replace_for_job(
            ArtifactKind.FLASHCARDS, "v1", [{"video_id": "v1", "n": 9}]
        )

        assert (removed, written) == (4, 1)
        assert artifact_store.list_for_job(ArtifactKind.FLASHCARDS, "v1") == [{"video_id": "v1", "n": 9}]
        assert artifact_store.list_for_job(ArtifactKind.FLASHCARDS, "v2") == [{"video_id": "v2", "n": 0}]

    def test_replace_for_job_rejects_foreign_items(self, artifact_store):
        artifact_store.insert_many(ArtifactKind.QUIZZES, [{"video_id": "v1"}])
        with pytest.raises(ValueError, match="belongs to v2"):
            artifact_store.replace_for_job(ArtifactKind.QUIZZES, "v1", [{"video_id": "v2"}])
        assert artifact_store.list_for_job(ArtifactKind.QUIZZES, "v1") == [{"video_id": "v1"}]
