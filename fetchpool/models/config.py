"""
Pydantic model for run configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pathvalidate import sanitize_filename
from pydantic import BaseModel, Field, field_validator, model_validator

from .job import ErrorMode

DEFAULT_WORKERS = 3
DEFAULT_OUTPUT_DIR = ".data"
DEFAULT_EXTENSION = "jpg"


class RunConfig(BaseModel):
    """A validated configuration model for a batch run."""

    # Pool Settings
    max_workers: int = DEFAULT_WORKERS
    error_mode: ErrorMode = ErrorMode.FAIL_FAST

    # Output Settings
    output_dir: str = DEFAULT_OUTPUT_DIR
    extension: str = DEFAULT_EXTENSION
    create_output_dir: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)
    input_file: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Normalizes the output extension and rejects unusable values."""
        cleaned = sanitize_filename(v.lstrip("."), platform="auto")
        if not cleaned:
            raise ValueError("Output extension cannot be empty.")
        if "." in cleaned:
            raise ValueError(f"Output extension must be a single suffix, got: {v}")
        return cleaned

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Output directory cannot be empty.")
        return v

    @model_validator(mode="after")
    def validate_output_dir_exists(self) -> "RunConfig":
        """The output directory must already exist unless we were asked to create it."""
        output_dir = Path(self.output_dir).expanduser()
        if not self.create_output_dir and not output_dir.is_dir():
            raise ValueError(
                f"Output directory '{self.output_dir}' does not exist. "
                "Create it first or pass --mkdir."
            )
        return self

    @property
    def fail_fast(self) -> bool:
        return self.error_mode == ErrorMode.FAIL_FAST

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "input_file", "create_output_dir"}
        return {key for key in cls.model_fields if key not in internal_fields}
