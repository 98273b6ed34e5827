"""Key-value option storage used for cursor counters and cached tokens.

The import pipeline only needs named settings that survive between process
invocations. `KeyValueStore` describes that interface; `MemoryStore` keeps
values in a dict (tests, one-off runs) and `JsonFileStore` persists them to a
JSON document at `settings.state_file`.
"""

from __future__ import annotations

import json
import os
import pathlib
import tempfile
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from overdrive_import.config import settings


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal interface for persisted named options."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def __contains__(self, key: object) -> bool: ...


class MemoryStore:
    """In-process store backed by a plain dict."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class JsonFileStore:
    """Store persisting every option to a single JSON file.

    The whole document is re-read on each access so separate processes see
    each other's writes, and written through a temporary file plus
    `os.replace` so readers never observe a partial document.
    """

    def __init__(self, path: str | pathlib.Path | None = None) -> None:
        """Initialize the store.

        Args:
            path (str | pathlib.Path | None): Location of the JSON document;
                defaults to `settings.state_file`.

        """
        self.path = pathlib.Path(path or settings.state_file)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable option file {}", self.path)
                return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            pathlib.Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def __contains__(self, key: object) -> bool:
        return key in self._load()
