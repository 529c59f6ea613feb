"""
Storage Layer.

This package handles all data persistence: the configuration file and the
key-value store holding the cached Spotify credential.
"""

from .config_manager import ConfigManager
from .store import JsonKeyValueStore, KeyValueStore

__all__ = ["ConfigManager", "JsonKeyValueStore", "KeyValueStore"]
