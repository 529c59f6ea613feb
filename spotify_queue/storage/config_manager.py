"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from spotify_queue.exceptions import ConfigurationError
from spotify_queue.models.config import QueueConfig

log = logging.getLogger(__name__)

# Defaults written into new or migrated config files
INI_DEFAULTS: dict[str, str] = {
    "youtube_api_key": "",
    "spotify_client_id": "",
    "spotify_client_secret": "",
    "playlist_length_limit": "100",
    "pacing_interval": "20",
    "allowed_groups": "",
    "m3u_path": "",
}


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def read(self) -> dict[str, Any]:
        """
        Reads and migrates the INI file without validating it.

        Raises:
            ConfigurationError: If the config file is missing or cannot be parsed.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'spotify-queue init' first."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        return self.get_config_as_dict()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> QueueConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated QueueConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        config_from_file = self.read()

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return QueueConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save. Missing keys get defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        for key in sorted(QueueConfig.get_ini_keys()):
            value = settings.get(key)
            if value is None:
                config["DEFAULT"][key] = INI_DEFAULTS.get(key, "")
            elif isinstance(value, list):
                config["DEFAULT"][key] = ",".join(map(str, value))
            else:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        try:
            return {
                "youtube_api_key": section.get("youtube_api_key", ""),
                "spotify_client_id": section.get("spotify_client_id", ""),
                "spotify_client_secret": section.get("spotify_client_secret", ""),
                "playlist_length_limit": section.getint("playlist_length_limit", 100),
                "pacing_interval": section.getfloat("pacing_interval", 20.0),
                "allowed_groups": [
                    g.strip()
                    for g in section.get("allowed_groups", "").split(",")
                    if g.strip()
                ],
                "m3u_path": section.get("m3u_path", ""),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        needs_saving = False
        config_section = self._parser["DEFAULT"]

        for key in sorted(QueueConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = INI_DEFAULTS.get(key, "")
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
