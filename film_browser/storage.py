"""Durable key-value backends for the wishlist.

Both backends are synchronous and hold string values only; the caller
decides how to serialise.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Protocol

from film_browser.errors import StorageError

log = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local backend; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """One JSON object on disk mapping keys to string values.

    Writes go to a temp file in the same directory and are swapped in with
    ``os.replace`` so a crash mid-write never leaves a truncated file.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return raw

    def read(self, key: str) -> str | None:
        value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value for {key!r} in {self.path} is not a string")
        return value

    def write(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except StorageError as e:
            log.warning("Overwriting unreadable store %s: %s", self.path, e)
            data = {}
        data[key] = value

        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory, prefix=".kv-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp, self.path)
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
