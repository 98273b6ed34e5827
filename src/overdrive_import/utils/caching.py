"""Expiry-aware caching on top of a `KeyValueStore`.

`TokenCache` stores a value together with the epoch second at which it
expires, mirroring how short-lived values such as OAuth access tokens are kept
between invocations. Expired entries are evicted when read.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from overdrive_import.utils.persistence import KeyValueStore

Clock = Callable[[], float]


class TokenCache:
    """Cache with per-entry time-to-live backed by a key-value store."""

    def __init__(self, store: KeyValueStore, *, clock: Clock = time.time) -> None:
        self.store = store
        self.clock = clock

    @staticmethod
    def _timeout_key(key: str) -> str:
        return f"_timeout_{key}"

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        if key not in self.store:
            return None
        expires_at = self.expires_at(key)
        if expires_at is not None and self.clock() >= expires_at:
            self.delete(key)
            return None
        return self.store.get(key)

    def expires_at(self, key: str) -> int | None:
        """Return the expiry (epoch seconds) recorded for `key`, if any."""
        value = self.store.get(self._timeout_key(key))
        return int(value) if value is not None else None

    def set(self, key: str, value: Any, ttl: int) -> int:
        """Store `value` for `ttl` seconds and return its expiry timestamp."""
        expires_at = int(self.clock()) + int(ttl)
        self.store.set(key, value)
        self.store.set(self._timeout_key(key), expires_at)
        return expires_at

    def delete(self, key: str) -> None:
        self.store.delete(key)
        self.store.delete(self._timeout_key(key))
