"""Redis backed cache store."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

import redis

from .base import CacheStore
from ..strategy.errors import CacheUnavailableError

logger = logging.getLogger(__name__)


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisCache(CacheStore):
    """:class:`CacheStore` on top of a ``redis.Redis`` client.

    Parameters
    ----------
    client : redis.Redis
        Configured client. Retry and timeout behaviour belong to the client.
    """

    def __init__(self, client: "redis.Redis") -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisCache":
        """Create a cache from a ``redis://`` URL."""
        return cls(redis.Redis.from_url(url, **kwargs))

    def _call(self, op: str, key: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except redis.exceptions.RedisError as exc:
            logger.error(f"Redis {op} failed for key {key}: {exc}")
            raise CacheUnavailableError(f"Redis {op} failed for key {key}: {exc}") from exc

    def set_int(self, key: str, value: int) -> None:
        self._call("SET", key, self._client.set, key, int(value))

    def get_int(self, key: str) -> Optional[int]:
        value = self._call("GET", key, self._client.get, key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError as exc:
            raise CacheUnavailableError(
                f"Key {key} holds a non-integer value {value!r}"
            ) from exc

    def set_value(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._call("SET", key, self._client.set, key, value, ex=ttl)

    def get_value(self, key: str) -> Optional[str]:
        value = self._call("GET", key, self._client.get, key)
        return None if value is None else _decode(value)

    def delete(self, key: str) -> None:
        self._call("DEL", key, self._client.delete, key)

    def set_map(
        self, key_for: Callable[[int], str], mapping: Mapping[int, int]
    ) -> None:
        # Non-transactional pipeline: fewer round trips, still per-key atomic.
        pipe = self._client.pipeline(transaction=False)
        for slot, value in mapping.items():
            pipe.set(key_for(slot), int(value))
        self._call("pipeline SET", key_for(1) if mapping else "<empty>", pipe.execute)


__all__ = ["RedisCache"]
