"""One pass over every job that finished with a warning.

The coordinator owns no job state: it scans the store, hands each job to the
:class:`JobProcessor` on a small thread pool and tallies what came back. A
job that runs past its wall-clock budget is abandoned, never interrupted,
and tagged as a timeout so the next pass chunks it. Until an abandoned run
returns it keeps its concurrency slot and its job is not started again.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from functools import partial

from pydantic import BaseModel, ConfigDict, Field

from lmg.errors.classifier import error_message
from lmg.errors.kinds import ErrorKind
from lmg.jobs.models import ProcessingStatus, VideoJob
from lmg.jobs.store import VideoStore
from lmg.retry.processor import JobProcessor, ProcessResult, ProcessStatus

logger = logging.getLogger(__name__)


class RetryBreakdown(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chunked_generation: int = Field(0, alias="chunkedGeneration")
    standard_retry: int = Field(0, alias="standardRetry")
    by_error_type: dict[str, int] = Field(default_factory=dict, alias="byErrorType")


class RetrySummary(BaseModel):
    """Outcome of one coordinator pass; serialises with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    videos_found: int = Field(0, alias="videosFound")
    successful_retries: int = Field(0, alias="successfulRetries")
    permanent_failures: int = Field(0, alias="permanentFailures")
    still_pending: int = Field(0, alias="stillPending")
    errors: list[str] = Field(default_factory=list)
    breakdown: RetryBreakdown = Field(default_factory=RetryBreakdown)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def record(self, result: ProcessResult) -> None:
        if result.success:
            self.successful_retries += 1
            if result.status == ProcessStatus.CHUNKED_PROCESSING:
                self.breakdown.chunked_generation += 1
            else:
                self.breakdown.standard_retry += 1
        elif result.status == ProcessStatus.PERMANENT_FAILURE:
            self.permanent_failures += 1
        else:
            self.still_pending += 1


class RetryCoordinator:
    def __init__(
        self,
        video_store: VideoStore,
        processor: JobProcessor,
        concurrency: int = 3,
        job_timeout: float = 600.0,
        poll_interval: float = 1.0,
    ):
        self._videos = video_store
        self._processor = processor
        self._concurrency = max(1, concurrency)
        self._job_timeout = job_timeout
        self._poll_interval = poll_interval
        # job_id -> future of a run that overran its budget and has not returned yet
        self._abandoned: dict[str, Future] = {}
        self._abandoned_lock = threading.Lock()

    def run(self) -> RetrySummary:
        summary = RetrySummary()
        logger.info("Starting failed-video retry pass")
        try:
            jobs = self._videos.find_by_status(ProcessingStatus.COMPLETED_WITH_WARNING)
        except Exception as e:
            logger.error("Retry pass could not scan jobs", exc_info=True)
            summary.errors.append(f"FATAL: {error_message(e)}")
            return summary

        summary.videos_found = len(jobs)
        for job in jobs:
            key = job.effective_error_type
            summary.breakdown.by_error_type[key] = summary.breakdown.by_error_type.get(key, 0) + 1
        logger.info("Found %d videos to retry (concurrency: %d)", len(jobs), self._concurrency)

        if jobs:
            self._dispatch(jobs, summary)

        logger.info(
            "Retry pass complete: found=%d success=%d failed=%d pending=%d",
            summary.videos_found,
            summary.successful_retries,
            summary.permanent_failures,
            summary.still_pending,
        )
        return summary

    def _dispatch(self, jobs: list[VideoJob], summary: RetrySummary) -> None:
        """Keep at most ``concurrency`` jobs running until every job is settled.

        An abandoned job still holds its worker until the provider call
        returns, so it keeps its slot and no new job is started in its place.
        Abandoned jobs are remembered across passes; a job whose earlier run
        is still going is counted as pending instead of being started twice.
        """
        self._prune_abandoned()
        queue: list[VideoJob] = []
        for job in jobs:
            if job.job_id in self._abandoned:
                logger.info("%s is still running from an earlier pass, leaving it pending", job.job_id)
                summary.still_pending += 1
            else:
                queue.append(job)

        in_flight: dict[Future, tuple[VideoJob, float]] = {}
        pool = ThreadPoolExecutor(max_workers=self._concurrency, thread_name_prefix="lmg-retry")
        try:
            while queue or in_flight:
                while queue and len(in_flight) + len(self._abandoned) < self._concurrency:
                    job = queue.pop(0)
                    in_flight[pool.submit(self._processor.process, job)] = (job, time.monotonic())

                with self._abandoned_lock:
                    waiting = list(in_flight) + list(self._abandoned.values())
                done, _ = wait(waiting, timeout=self._poll_interval, return_when=FIRST_COMPLETED)
                for fut in done:
                    if fut in in_flight:
                        job, _started = in_flight.pop(fut)
                        self._settle(fut, job, summary)
                self._prune_abandoned()

                now = time.monotonic()
                for fut, (job, started) in list(in_flight.items()):
                    if now - started >= self._job_timeout:
                        del in_flight[fut]
                        with self._abandoned_lock:
                            self._abandoned[job.job_id] = fut
                        fut.add_done_callback(partial(_log_late_outcome, job.job_id))
                        self._abandon(job, summary)
        finally:
            pool.shutdown(wait=False)

    def _prune_abandoned(self) -> None:
        with self._abandoned_lock:
            for job_id, fut in list(self._abandoned.items()):
                if fut.done():
                    del self._abandoned[job_id]

    def _settle(self, fut: Future, job: VideoJob, summary: RetrySummary) -> None:
        try:
            result = fut.result()
        except Exception as e:
            logger.error("Processing %s failed, leaving it pending", job.job_id, exc_info=True)
            summary.errors.append(f"{job.job_id}: {error_message(e)}")
            summary.still_pending += 1
            return
        summary.record(result)
        logger.info("%s -> %s (success=%s)", job.job_id, result.status.value, result.success)

    def _abandon(self, job: VideoJob, summary: RetrySummary) -> None:
        message = f"Processing timed out after {self._job_timeout:g}s"
        logger.warning("Abandoning %s: %s", job.job_id, message)
        summary.errors.append(f"{job.job_id}: {message}")
        summary.still_pending += 1
        try:
            tagged = self._videos.update_fields(
                job.job_id,
                {"error_type": ErrorKind.TIMEOUT.value, "error_message": message},
                only_if_status=ProcessingStatus.COMPLETED_WITH_WARNING,
            )
        except Exception:
            logger.error("Could not tag %s as timed out", job.job_id, exc_info=True)
            return
        if not tagged:
            logger.info("%s already left completed_with_warning, timeout not recorded", job.job_id)


def _log_late_outcome(job_id: str, fut: Future) -> None:
    exc = fut.exception()
    if exc is not None:
        logger.error("Abandoned run of %s failed after its timeout: %s", job_id, error_message(exc))
    else:
        result = fut.result()
        logger.info("Abandoned run of %s finished late -> %s", job_id, result.status.value)
