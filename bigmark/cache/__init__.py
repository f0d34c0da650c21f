"""Cache store backends for assembled probability tables."""

import os
from typing import Optional

from dotenv import load_dotenv

from .base import CacheStore
from .memory import InMemoryCache
from .redis_store import RedisCache

load_dotenv()
DEFAULT_REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
MEMORY_URL = "memory://"


def make_cache(url: Optional[str] = None) -> CacheStore:
    """Build the cache store configured by ``url`` or ``REDIS_URL``.

    ``memory://`` selects a process-local :class:`InMemoryCache`; any other
    value is handed to ``redis.Redis.from_url``.
    """
    target = url or DEFAULT_REDIS_URL
    if target.startswith(MEMORY_URL):
        return InMemoryCache()
    return RedisCache.from_url(target, decode_responses=True)


__all__ = [
    "CacheStore",
    "DEFAULT_REDIS_URL",
    "InMemoryCache",
    "MEMORY_URL",
    "RedisCache",
    "make_cache",
]
