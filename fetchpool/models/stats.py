"""
Dataclass for tracking batch run statistics across worker threads.
"""

import threading
import time
from dataclasses import dataclass, field

from .job import Job, JobFailure


@dataclass
class RunStats:
    """Tracks statistics for a batch run. All updates are thread-safe."""

    jobs_total: int = 0
    jobs_completed: int = 0
    jobs_failed: int = 0
    jobs_crashed: int = 0
    bytes_written: int = 0
    jobs_per_worker: dict[int, int] = field(default_factory=dict)
    completed_ids: set[int] = field(default_factory=set)
    failures: list[JobFailure] = field(default_factory=list)

    started_at: float | None = None
    finished_at: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def mark_started(self) -> None:
        self.started_at = time.monotonic()

    def mark_finished(self) -> None:
        self.finished_at = time.monotonic()

    @property
    def duration_s(self) -> float:
        """Wall-clock time of the run, or 0 if it never started."""
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    @property
    def jobs_processed(self) -> int:
        """Number of jobs claimed and executed, whether they succeeded or not."""
        return sum(self.jobs_per_worker.values())

    def record_success(self, worker_id: int, job: Job, size: int) -> None:
        """
        Records a completed job.

        Args:
            worker_id: The worker that executed the job.
            job: The job that completed.
            size: Number of bytes written for the job's output.
        """
        with self._lock:
            self.jobs_completed += 1
            self.bytes_written += size
            self.completed_ids.add(job.id)
            self.jobs_per_worker[worker_id] = self.jobs_per_worker.get(worker_id, 0) + 1

    def record_failure(self, failure: JobFailure) -> None:
        """Records a failed job."""
        with self._lock:
            self.jobs_failed += 1
            self.failures.append(failure)
            self.jobs_per_worker[failure.worker_id] = (
                self.jobs_per_worker.get(failure.worker_id, 0) + 1
            )

    def record_crash(self, worker_id: int) -> None:
        """Records a job that was interrupted by an unexpected worker error."""
        with self._lock:
            self.jobs_crashed += 1
            self.jobs_per_worker[worker_id] = self.jobs_per_worker.get(worker_id, 0) + 1
