from __future__ import annotations

from pathlib import Path

import pytest

from spotify_queue.exceptions import ConfigurationError
from spotify_queue.storage.config_manager import ConfigManager

VALID = {
    "youtube_api_key": "yt-key",
    "spotify_client_id": "cid",
    "spotify_client_secret": "csecret",
}


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "spotify-queue" / "config.ini"


def test_round_trip_with_defaults(config_file: Path) -> None:
    manager = ConfigManager(config_file)
    manager.save_new_config({**VALID, "allowed_groups": ["6", "admins"]})

    config = ConfigManager(config_file).load_config()

    assert config.youtube_api_key == "yt-key"
    assert config.playlist_length_limit == 100
    assert config.pacing_interval == 20.0
    assert config.allowed_groups == ["6", "admins"]
    assert config.config_path == str(config_file.parent)


def test_missing_file_raises(config_file: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        ConfigManager(config_file).load_config()


def test_missing_credentials_fail_validation(config_file: Path) -> None:
    ConfigManager(config_file).save_new_config({"youtube_api_key": "yt-key"})

    with pytest.raises(ConfigurationError, match="validation failed"):
        ConfigManager(config_file).load_config()


def test_length_limit_must_be_positive(config_file: Path) -> None:
    ConfigManager(config_file).save_new_config({**VALID, "playlist_length_limit": 0})

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_non_numeric_limit_is_a_configuration_error(config_file: Path) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        "[DEFAULT]\nyoutube_api_key = k\nspotify_client_id = i\n"
        "spotify_client_secret = s\nplaylist_length_limit = lots\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_old_files_are_migrated(config_file: Path) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        "[DEFAULT]\nyoutube_api_key = k\nspotify_client_id = i\nspotify_client_secret = s\n",
        encoding="utf-8",
    )

    config = ConfigManager(config_file).load_config()

    assert config.playlist_length_limit == 100
    assert "pacing_interval" in config_file.read_text(encoding="utf-8")


def test_cli_options_override_file(config_file: Path) -> None:
    ConfigManager(config_file).save_new_config(VALID)

    config = ConfigManager(config_file).load_config({"playlist_length_limit": 3})

    assert config.playlist_length_limit == 3
