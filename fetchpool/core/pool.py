"""
The pool owns the job queue and the workers for one batch run.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from typing import Callable, Iterable, Optional

from rich.markup import escape

from fetchpool.exceptions import BatchFailedError, PoolStateError
from fetchpool.media.fetcher import Fetcher, HttpFetcher
from fetchpool.models.job import ErrorMode, Job, JobFailure, jobs_from_locations
from fetchpool.models.stats import RunStats
from fetchpool.storage.sink import OutputSink

from .job_queue import JobQueue
from .worker import Worker

log = logging.getLogger(__name__)


class Pool:
    """
    Runs a fixed set of workers in parallel threads until the queue is drained.

    A pool is one-shot: jobs are loaded once, the pool is started once, and
    `start()` only returns after every worker has exited. Job failures are
    recorded by the workers and raised from `start()` after the join:

    - In fail-fast mode the first failure raises the stop signal, workers stop
      claiming new jobs, in-flight jobs run to completion, and the first
      JobExecutionError is raised.
    - In continue mode every job is attempted and a BatchFailedError listing all
      failures is raised at the end.
    """

    def __init__(
        self, sink: OutputSink, error_mode: ErrorMode = ErrorMode.FAIL_FAST
    ):
        self.sink = sink
        self.error_mode = ErrorMode(error_mode)
        self.queue = JobQueue()
        self.stats = RunStats()
        self.workers: list[Worker] = []

        self._stop_event = threading.Event()
        self._error_lock = threading.Lock()
        self._first_failure: Optional[JobFailure] = None
        self._crash: Optional[BaseException] = None
        self._started = False

    @classmethod
    def build(
        cls,
        worker_count: int,
        sink: OutputSink,
        fetcher_factory: Callable[[], Fetcher] = HttpFetcher,
        error_mode: ErrorMode = ErrorMode.FAIL_FAST,
    ) -> "Pool":
        """
        Creates a pool with `worker_count` workers numbered from 0.

        A pool with zero workers is valid: starting it returns immediately and
        leaves the queue untouched.

        Raises:
            ValueError: If `worker_count` is negative.
        """
        if worker_count < 0:
            raise ValueError(f"Worker count cannot be negative, got {worker_count}.")

        pool = cls(sink, error_mode)
        pool.workers = [
            Worker(
                worker_id,
                pool.queue,
                fetcher_factory(),
                sink,
                pool.stats,
                pool._stop_event,
                pool.report_failure,
            )
            for worker_id in range(worker_count)
        ]
        return pool

    @property
    def stopped(self) -> bool:
        """Whether the stop signal has been raised."""
        return self._stop_event.is_set()

    def load_jobs(self, locations: Iterable[str]) -> list[Job]:
        """
        Turns each location into a job whose id is its position, and fills the queue.
        """
        if self._started:
            raise PoolStateError("Jobs must be loaded before the pool is started.")

        jobs = jobs_from_locations(list(locations))
        self.queue.populate(jobs)
        self.stats.jobs_total = len(jobs)
        return jobs

    def start(self) -> None:
        """
        Runs all workers concurrently and blocks until every one has exited.

        Raises:
            PoolStateError: If the pool was already started.
            JobExecutionError: In fail-fast mode, the first job failure.
            BatchFailedError: In continue mode, if any job failed.
        """
        if self._started:
            raise PoolStateError("Pool has already been started; pools are one-shot.")
        self._started = True

        self.stats.mark_started()
        try:
            if not self.workers:
                log.warning(
                    "[yellow]Pool has no workers; no jobs will be processed.[/yellow]"
                )
                return

            log.info(
                f"Starting {len(self.workers)} workers for {len(self.queue)} jobs."
            )
            with ThreadPoolExecutor(
                max_workers=len(self.workers), thread_name_prefix="fetchpool-worker"
            ) as executor:
                futures = {executor.submit(worker.run): worker for worker in self.workers}
                try:
                    self._wait_for_workers(futures)
                except KeyboardInterrupt:
                    log.warning(
                        "[yellow]Interrupted. Waiting for in-flight jobs to finish...[/yellow]"
                    )
                    self.cancel()
                    wait(futures)
                    raise
        finally:
            self.stats.mark_finished()

        self._raise_for_failures()

    def cancel(self) -> None:
        """
        Raises the stop signal. Workers finish their in-flight job and exit
        without claiming another; unclaimed jobs stay in the queue.
        """
        if not self._stop_event.is_set():
            log.info("Stop requested; workers will not claim new jobs.")
        self._stop_event.set()

    def report_failure(self, failure: JobFailure) -> None:
        """Called by workers, from their own threads, when a job fails."""
        self.stats.record_failure(failure)
        with self._error_lock:
            is_first = self._first_failure is None
            if is_first:
                self._first_failure = failure

        if self.error_mode == ErrorMode.FAIL_FAST:
            if is_first:
                log.error(
                    f"[red]Stopping run after failure of job #{failure.job.id}.[/red]"
                )
            self._stop_event.set()

    def _wait_for_workers(self, futures: dict[Future, Worker]) -> None:
        for future in as_completed(futures):
            worker = futures[future]
            error = future.exception()
            if error is None:
                log.debug(f"worker #{worker.id} - Processed {future.result()} jobs")
                continue

            log.error(
                f"[red]worker #{worker.id} crashed: {escape(str(error))}[/red]"
            )
            with self._error_lock:
                if self._crash is None:
                    self._crash = error
            self._stop_event.set()

    def _raise_for_failures(self) -> None:
        if self._crash is not None:
            raise self._crash

        if self._first_failure is None:
            return

        if self.error_mode == ErrorMode.FAIL_FAST:
            raise self._first_failure.error

        raise BatchFailedError(list(self.stats.failures))
