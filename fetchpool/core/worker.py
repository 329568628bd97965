"""
A worker claims jobs from the shared queue and executes them one at a time.
"""

import asyncio
import logging
import threading
from typing import Callable

from rich.markup import escape

from fetchpool.core.job_queue import JobQueue
from fetchpool.exceptions import JobExecutionError
from fetchpool.media.fetcher import Fetcher
from fetchpool.models.job import Job, JobFailure
from fetchpool.models.stats import RunStats
from fetchpool.storage.sink import OutputSink

log = logging.getLogger(__name__)


class Worker:
    """
    Repeatedly claims a job and fetches it until the queue is drained or the
    pool raises its stop signal.

    Each worker runs on its own thread with its own event loop and fetcher, so
    the only state it shares with other workers is the queue and the stats.
    """

    def __init__(
        self,
        worker_id: int,
        queue: JobQueue,
        fetcher: Fetcher,
        sink: OutputSink,
        stats: RunStats,
        stop_event: threading.Event,
        on_failure: Callable[[JobFailure], None],
    ):
        self.id = worker_id
        self.queue = queue
        self.fetcher = fetcher
        self.sink = sink
        self.stats = stats
        self.stop_event = stop_event
        self.on_failure = on_failure

    def run(self) -> int:
        """
        Drains the queue on the calling thread.

        Returns:
            The number of jobs this worker executed, successful or not.
        """
        return asyncio.run(self._drain())

    async def _drain(self) -> int:
        processed = 0
        try:
            while not self.stop_event.is_set():
                job = self.queue.claim_one()
                if job is None:
                    # The queue only ever shrinks, so there is no point re-checking.
                    break
                await self.process_job(job)
                processed += 1
        finally:
            await self.fetcher.close()
            log.debug(f"worker #{self.id} - Exiting after {processed} jobs")
        return processed

    async def process_job(self, job: Job) -> bool:
        """
        Fetches a single job into its output file.

        A JobExecutionError is reported to the pool rather than raised, and the
        job's partial output is removed. Any other exception propagates.

        Returns:
            True if the job completed, False if it failed.
        """
        log.info(
            f"worker #{self.id} - Downloading job #{job.id} - {escape(job.location)}"
        )
        destination = self.sink.path_for(job)
        try:
            size = await self.fetcher.fetch(job, destination)
        except JobExecutionError as e:
            e.worker_id = self.id
            self.sink.discard(job)
            log.error(
                f"[red]✗ worker #{self.id} - Failed job #{job.id} - {escape(str(e))}[/red]"
            )
            self.on_failure(JobFailure(job=job, worker_id=self.id, error=e))
            return False
        except Exception:
            self.sink.discard(job)
            self.stats.record_crash(self.id)
            raise

        self.stats.record_success(self.id, job, size)
        log.info(
            f"worker #{self.id} - Completed job #{job.id} - {escape(job.location)}"
        )
        return True

    def __repr__(self) -> str:
        return f"Worker(id={self.id})"
