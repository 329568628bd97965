"""
Maps jobs to their output files inside a pre-existing output directory.
"""

import logging
import os
from pathlib import Path

from fetchpool.models.job import Job

log = logging.getLogger(__name__)


class OutputSink:
    """
    Names each job's output deterministically from its id: `<output_dir>/<id>.<ext>`.

    The output directory is never created here. Since job ids are unique within
    a batch, workers can write their outputs without any coordination.
    """

    def __init__(self, output_dir: Path, extension: str):
        self.output_dir = Path(output_dir)
        self.extension = extension.lstrip(".")

    def path_for(self, job: Job) -> Path:
        """Returns the output path for a job."""
        return self.output_dir / f"{job.id}.{self.extension}"

    def discard(self, job: Job) -> bool:
        """
        Removes a partially written output after a failed job.

        Returns:
            True if a file was removed, False if there was nothing to remove.
        """
        path = self.path_for(job)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            log.warning(f"[yellow]Could not remove partial output {path}:[/] {e}")
            return False
        log.debug(f"Removed partial output for job #{job.id}: {path}")
        return True

    def __repr__(self) -> str:
        return f"OutputSink({str(self.output_dir)!r}, {self.extension!r})"
