"""In-memory remote backend implementation."""

import fnmatch
import time
from datetime import timedelta

from cachetools import TLRUCache  # type: ignore[import-untyped]


def _expires_at(_key: str, value: tuple[bytes, float], now: float) -> float:
    return now + value[1]


class InMemoryCacheBackend:
    """In-process stand-in for a remote cache layer.

    Suitable for single-process deployments and tests. Uses cachetools'
    time-aware LRU so each item keeps its own TTL.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        default_ttl: float = 300.0,
        timer=time.monotonic,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of items in the cache.
            default_ttl: Default TTL in seconds for items.
            timer: Clock used for expiry, in seconds.
        """
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._cache: TLRUCache[str, tuple[bytes, float]] = TLRUCache(
            maxsize=maxsize,
            ttu=_expires_at,
            timer=timer,
        )

    async def get(self, key: str) -> bytes | None:
        """Retrieve cached value by key.

        Returns:
            The cached value as bytes, or None if not found or expired.
        """
        item = self._cache.get(key)
        return item[0] if item is not None else None

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: timedelta | None = None,
    ) -> None:
        """Store value with optional TTL.

        Args:
            key: The cache key.
            value: The value to store as bytes.
            ttl: Optional time-to-live. If None, uses default.
        """
        seconds = ttl.total_seconds() if ttl is not None else self._default_ttl
        self._cache[key] = (value, seconds)

    async def delete(self, key: str) -> bool:
        """Delete cached value.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        try:
            del self._cache[key]
            return True
        except KeyError:
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        return key in self._cache

    async def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob pattern.

        Returns:
            Number of keys deleted.
        """
        keys_to_delete = [
            key for key in list(self._cache.keys())
            if fnmatch.fnmatchcase(key, pattern)
        ]

        count = 0
        for key in keys_to_delete:
            if await self.delete(key):
                count += 1

        return count

    def is_available(self) -> bool:
        """In-process storage is always available."""
        return True

    async def close(self) -> None:
        """Nothing to release."""
        return None

    def __len__(self) -> int:
        """Return the number of items in the cache."""
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize
