"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fetchpool.exceptions import ConfigurationError
from fetchpool.models.config import (
    DEFAULT_EXTENSION,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_WORKERS,
    RunConfig,
)
from fetchpool.models.job import ErrorMode

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> RunConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing config file is not an error; built-in defaults are used instead.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated RunConfig object.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
        else:
            log.debug(
                f"No configuration file at '{self.config_file_path}', using defaults."
            )

        try:
            config_from_file = self._get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return RunConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def read_settings(self) -> dict[str, Any]:
        """Returns the raw settings from the config file without validating them."""
        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
            return self._get_config_as_dict()
        except (configparser.Error, ValueError) as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: Values to write; any key not given falls back to its default.
        """
        settings = settings or {}
        config = configparser.ConfigParser()
        config["DEFAULT"] = {}

        defaults = self._defaults()
        for key in sorted(RunConfig.get_ini_keys()):
            value = settings.get(key, defaults.get(key))
            if isinstance(value, ErrorMode):
                config["DEFAULT"][key] = value.value
            elif value is not None:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        return {
            "max_workers": section.getint("max_workers", DEFAULT_WORKERS),
            "output_dir": section.get("output_dir", DEFAULT_OUTPUT_DIR),
            "extension": section.get("extension", DEFAULT_EXTENSION),
            "error_mode": section.get("error_mode", ErrorMode.FAIL_FAST.value),
        }

    @staticmethod
    def _defaults() -> dict[str, Any]:
        return {
            "max_workers": DEFAULT_WORKERS,
            "output_dir": DEFAULT_OUTPUT_DIR,
            "extension": DEFAULT_EXTENSION,
            "error_mode": ErrorMode.FAIL_FAST,
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = self._defaults()
        needs_saving = False

        config_section = self._parser["DEFAULT"]

        for key in sorted(RunConfig.get_ini_keys()):
            if key not in config_section:
                default_value = defaults[key]
                if isinstance(default_value, ErrorMode):
                    config_section[key] = default_value.value
                else:
                    config_section[key] = str(default_value)

                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
