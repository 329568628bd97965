"""
Utilities for handling local file paths.
"""

from pathlib import Path

from pathvalidate import sanitize_filepath


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def resolve_output_dir(output_dir: str) -> Path:
    """Sanitizes a user-supplied output directory and expands '~'."""
    return Path(sanitize_filepath(output_dir, platform="auto")).expanduser()
