"""Tests for the typer CLI."""

import json

from typer.testing import CliRunner

import lmg.cli as cli
from lmg.jobs import VideoJob
from lmg.retry import ProcessResult, ProcessStatus, RetrySummary

runner = CliRunner()


class StubCoordinator:
    def __init__(self, summary):
        self.summary = summary
        self.runs = 0

    def run(self):
        self.runs += 1
        return self.summary


def test_classify_rate_limit():
    result = runner.invoke(cli.app, ["classify", "Error 429: Too many requests"])
    assert result.exit_code == 0
    assert "LLM_RATE_LIMIT" in result.output
    assert "retry with standard generation" in result.output


def test_classify_permanent():
    result = runner.invoke(cli.app, ["classify", "403 Forbidden: insufficient permissions"])
    assert result.exit_code == 0
    assert "LLM_PERMISSION_DENIED" in result.output
    assert "fail permanently" in result.output


def test_retry_prints_summary(monkeypatch, tmp_path):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))
    stub = StubCoordinator(RetrySummary(videos_found=3, successful_retries=3))
    monkeypatch.setattr(cli, "build_coordinator", lambda settings, provider: stub)

    result = runner.invoke(cli.app, ["retry"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["videosFound"] == 3
    assert data["successfulRetries"] == 3


def test_retry_fatal_exits_nonzero(monkeypatch, tmp_path):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))
    stub = StubCoordinator(RetrySummary(errors=["FATAL: database is down"]))
    monkeypatch.setattr(cli, "build_coordinator", lambda settings, provider: stub)
    result = runner.invoke(cli.app, ["retry"])
    assert result.exit_code == 1


def test_retry_without_api_key(monkeypatch, tmp_path):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))

    def _no_key(settings, provider):
        raise ValueError("API key not configured for provider 'openai'.")

    monkeypatch.setattr(cli, "build_coordinator", _no_key)
    result = runner.invoke(cli.app, ["retry"])
    assert result.exit_code == 1
    assert "API key not configured" in result.output


def test_schedule_once(monkeypatch, tmp_path):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))
    stub = StubCoordinator(RetrySummary(videos_found=1, still_pending=1))
    monkeypatch.setattr(cli, "build_coordinator", lambda settings, provider: stub)

    result = runner.invoke(cli.app, ["schedule", "--once", "--interval", "5"])

    assert result.exit_code == 0
    assert stub.runs == 1
    assert "found=1" in result.output


def test_process_unknown_job(monkeypatch, tmp_path, video_store):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))
    monkeypatch.setattr(cli, "get_video_store", lambda: video_store)
    result = runner.invoke(cli.app, ["process", "missing"])
    assert result.exit_code == 1
    assert "Job not found" in result.output


def test_process_runs_processor(monkeypatch, tmp_path, video_store):
    monkeypatch.setenv("LMG_DATA_DIR", str(tmp_path))
    video_store.create(VideoJob(job_id="v1"))

    class StubProcessor:
        def process(self, job):
            return ProcessResult(job.job_id, ProcessStatus.CHUNKED_PROCESSING, False, "LLM_TIMEOUT", ["quizzes"])

    monkeypatch.setattr(cli, "get_video_store", lambda: video_store)
    monkeypatch.setattr(cli, "build_processor", lambda settings, provider: StubProcessor())

    result = runner.invoke(cli.app, ["process", "v1"])

    assert result.exit_code == 0
    assert "chunked_processing" in result.output
    assert "Incomplete: quizzes" in result.output
