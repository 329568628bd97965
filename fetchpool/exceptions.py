"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fetchpool.models.job import Job, JobFailure


class FetchPoolError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(FetchPoolError):
    """Raised for issues related to configuration loading or validation."""


class InputFileError(FetchPoolError):
    """Raised when the batch input file cannot be read or parsed."""


class PoolStateError(FetchPoolError):
    """Raised when a pool is used outside of its one-shot lifecycle."""


class JobExecutionError(FetchPoolError):
    """Raised when a single job cannot be fetched or stored."""

    def __init__(self, job: Job, message: str, worker_id: int | None = None):
        super().__init__(f"Job #{job.id} ({job.location}): {message}")
        self.job = job
        self.worker_id = worker_id


class FetchError(JobExecutionError):
    """Raised when the transfer from a job's location fails."""


class WriteError(JobExecutionError):
    """Raised when a job's output cannot be written."""


class BatchFailedError(FetchPoolError):
    """
    Raised at the end of a keep-going run when one or more jobs failed.
    """

    def __init__(self, failures: list[JobFailure]):
        ids = ", ".join(str(f.job.id) for f in sorted(failures, key=lambda f: f.job.id))
        super().__init__(f"{len(failures)} job(s) failed: {ids}")
        self.failures = failures
