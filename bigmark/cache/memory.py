"""Process-local cache store used for tests and local development."""

from __future__ import annotations

import threading
import time
from typing import Optional, Union

from .base import CacheStore

_Value = Union[int, str]


class InMemoryCache(CacheStore):
    """Thread-safe dictionary backed :class:`CacheStore` with per-key TTL."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, tuple[_Value, Optional[float]]] = {}

    def _get(self, key: str) -> Optional[_Value]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._data[key]
                return None
            return value

    def _set(self, key: str, value: _Value, ttl: Optional[int] = None) -> None:
        expires_at = None if ttl is None else self._clock() + ttl
        with self._lock:
            self._data[key] = (value, expires_at)

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def get_int(self, key: str) -> Optional[int]:
        value = self._get(key)
        return None if value is None else int(value)

    def set_value(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._set(key, value, ttl)

    def get_value(self, key: str) -> Optional[str]:
        value = self._get(key)
        return None if value is None else str(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        """Return the stored keys starting with ``prefix`` (expired ones included)."""
        with self._lock:
            return [key for key in self._data if key.startswith(prefix)]

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


__all__ = ["InMemoryCache"]
