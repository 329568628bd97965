"""
Core concurrency engine for batch downloads.

This package contains the primary logic. The `Pool` acts as the run
coordinator, owning the `JobQueue` and starting one `Worker` per thread;
each worker claims jobs from the queue until it is drained.
"""

from .job_queue import JobQueue
from .pool import Pool
from .worker import Worker

__all__ = ["JobQueue", "Pool", "Worker"]
