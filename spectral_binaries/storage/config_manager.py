"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from spectral_binaries.exceptions import ConfigurationError
from spectral_binaries.models.config import PackagerConfig

log = logging.getLogger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Never written to disk; supplied through the environment or the CLI.
_SECRET_KEYS = {"github_token"}


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(
        self,
        cli_options: dict[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> PackagerConfig:
        """
        Builds the configuration from defaults, the INI file (if present), the
        environment and CLI overrides, in increasing order of precedence.

        Args:
            cli_options: A dictionary of options provided via the command line.
            environ: Environment to read the token from; defaults to os.environ.

        Returns:
            A validated PackagerConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        settings: dict[str, Any] = {}

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
            settings.update(self._get_config_as_dict())
        else:
            log.debug(f"No config file at '{self.config_file_path}', using defaults.")

        environ = os.environ if environ is None else environ
        if token := environ.get(TOKEN_ENV_VAR):
            settings["github_token"] = token

        if cli_options:
            settings.update(cli_options)

        try:
            return PackagerConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file, filling unspecified keys
        with their defaults.
        """
        try:
            config = PackagerConfig(**(settings or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        parser = configparser.ConfigParser(interpolation=None)
        parser["DEFAULT"] = {
            key: self._to_ini_value(value)
            for key, value in config.model_dump().items()
            if key not in _SECRET_KEYS
        }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                parser.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the known keys of the 'DEFAULT' section into a dictionary."""
        section = self._parser["DEFAULT"]
        known = PackagerConfig.get_ini_keys()
        unknown = set(section) - known
        if unknown:
            log.warning(
                f"[yellow]Ignoring unknown config keys: {', '.join(sorted(unknown))}[/yellow]"
            )

        try:
            values: dict[str, Any] = {
                key: section.get(key) for key in known if key in section
            }
            if "strict" in section:
                values["strict"] = section.getboolean("strict")
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
        return values

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = PackagerConfig()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in PackagerConfig.get_ini_keys() - _SECRET_KEYS:
            if key not in config_section:
                config_section[key] = self._to_ini_value(getattr(defaults, key))
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
