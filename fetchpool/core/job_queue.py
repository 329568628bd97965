"""
The shared queue of pending jobs that workers race to claim.
"""

import logging
import threading
from typing import Iterable, Optional

from fetchpool.models.job import Job

log = logging.getLogger(__name__)


class JobQueue:
    """
    A lock-guarded mapping of job id to job with an atomic take-one operation.

    The order in which jobs are claimed is unspecified. Workers race for jobs
    and callers must not rely on FIFO or any other ordering.
    """

    def __init__(self) -> None:
        self._jobs: dict[int, Job] = {}
        self._lock = threading.Lock()

    def populate(self, jobs: Iterable[Job]) -> None:
        """
        Replaces the queue contents. Must happen before any worker starts claiming.

        Raises:
            ValueError: If two jobs share the same id.
        """
        pending: dict[int, Job] = {}
        for job in jobs:
            if job.id in pending:
                raise ValueError(f"Duplicate job id {job.id} in batch.")
            pending[job.id] = job

        with self._lock:
            self._jobs = pending
        log.debug(f"Job queue populated with {len(pending)} jobs.")

    def claim_one(self) -> Optional[Job]:
        """
        Atomically removes and returns one remaining job, or None once drained.
        """
        with self._lock:
            if not self._jobs:
                return None
            _, job = self._jobs.popitem()
            return job

    def pending_ids(self) -> set[int]:
        """Returns a snapshot of the ids that have not been claimed yet."""
        with self._lock:
            return set(self._jobs)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
