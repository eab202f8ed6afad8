"""Failed-video retry: per-job processor and the pass-level coordinator."""

from lmg.retry.coordinator import RetryBreakdown, RetryCoordinator, RetrySummary
from lmg.retry.processor import JobProcessor, ProcessResult, ProcessStatus

__all__ = [
    "JobProcessor",
    "ProcessResult",
    "ProcessStatus",
    "RetryBreakdown",
    "RetryCoordinator",
    "RetrySummary",
]
