"""
A small file-based JSON key-value store used to persist the Spotify access token
across process restarts.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Protocol

log = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """The durable storage the credential cache writes through."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class JsonKeyValueStore:
    """
    Manages a single JSON document of key/value pairs on disk.

    Every write rewrites the whole document through a temporary file and an
    atomic replace. Writes are serialized so the store can be used from
    worker threads.
    """

    FILE_NAME = "store.json"

    def __init__(self, store_dir_path: Path):
        """
        Initializes the store.

        Args:
            store_dir_path: The directory where the store file will be kept.
        """
        self.store_dir = store_dir_path
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self.store_path = self.store_dir / self.FILE_NAME
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.store_path.is_file():
            return {}
        try:
            with open(self.store_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.warning(f"Store file '{self.store_path}' is unreadable, ignoring: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        tmp_path = self.store_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.store_path)

    def get(self, key: str) -> Any | None:
        """Retrieves a value from the store. Returns None if the key is not present."""
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        """Saves a value to the store."""
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def delete(self, key: str) -> None:
        """Removes a key from the store if present."""
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)

