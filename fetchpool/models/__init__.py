"""
Data Models Layer.

This package contains the dataclasses and Pydantic models that define the core
data structures used throughout the application, such as jobs, configuration
and run statistics.
"""

from .config import RunConfig
from .job import ErrorMode, Job, JobFailure, jobs_from_locations
from .stats import RunStats

__all__ = [
    "ErrorMode",
    "Job",
    "JobFailure",
    "RunConfig",
    "RunStats",
    "jobs_from_locations",
]
