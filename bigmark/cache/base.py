"""Contract shared by the cache store backends."""

from __future__ import annotations

from typing import Callable, Mapping, Optional


class CacheStore:
    """Key-value store holding assembled tables and cached configuration.

    Every call is atomic for its own key only; there is no cross-key
    transaction. Backends raise
    :class:`~bigmark.strategy.errors.CacheUnavailableError` when the
    underlying store cannot be reached.
    """

    def set_int(self, key: str, value: int) -> None:
        raise NotImplementedError

    def get_int(self, key: str) -> Optional[int]:
        raise NotImplementedError

    def set_value(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store a string, expiring after ``ttl`` seconds when given."""
        raise NotImplementedError

    def get_value(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def set_map(
        self, key_for: Callable[[int], str], mapping: Mapping[int, int]
    ) -> None:
        """Store every ``slot -> value`` entry under ``key_for(slot)``.

        Entries are written one by one; readers may observe a partially
        written map.
        """
        for slot, value in mapping.items():
            self.set_int(key_for(slot), value)

    def get_map_entry(self, key: str) -> Optional[int]:
        """Return one entry previously written by :meth:`set_map`."""
        return self.get_int(key)


__all__ = ["CacheStore"]
