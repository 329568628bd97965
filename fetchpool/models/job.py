"""
Immutable job records shared between the queue, workers and the pool.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Job:
    """A single location to fetch, identified by its position in the batch."""

    id: int
    location: str


@dataclass(frozen=True)
class JobFailure:
    """A job that could not be completed, with the worker that ran it."""

    job: Job
    worker_id: int
    error: Exception


class ErrorMode(str, Enum):
    """How the pool reacts to the first failed job."""

    FAIL_FAST = "fail_fast"
    CONTINUE = "continue"


def jobs_from_locations(locations: list[str]) -> list[Job]:
    """Builds jobs whose ids follow the enumeration order of the locations."""
    return [Job(id=index, location=location) for index, location in enumerate(locations)]
