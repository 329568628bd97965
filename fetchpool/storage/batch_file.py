"""
Loads the JSON batch file listing the locations to fetch.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from fetchpool.exceptions import InputFileError

log = logging.getLogger(__name__)


class BatchFile(BaseModel):
    """The input document: `{"urls": ["...", "..."]}`."""

    urls: list[str]

    @field_validator("urls")
    @classmethod
    def validate_urls(cls, v: list[str]) -> list[str]:
        """Strips each location and rejects blank entries."""
        cleaned = [url.strip() for url in v]
        if blank := [i for i, url in enumerate(cleaned) if not url]:
            raise ValueError(f"Blank location at position(s): {blank}")
        return cleaned


def load_batch_file(path: Path) -> BatchFile:
    """
    Reads and validates a batch file.

    Args:
        path: Path to the JSON batch file.

    Returns:
        The parsed batch, with locations in file order.

    Raises:
        InputFileError: If the file is unreadable or does not match the expected shape.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Could not read batch file '{path}': {e}") from e

    try:
        batch = BatchFile.model_validate_json(raw)
    except ValidationError as e:
        raise InputFileError(f"Invalid batch file '{path}':\n{e}") from e

    log.debug(f"Loaded {len(batch.urls)} locations from '{path}'.")
    return batch
