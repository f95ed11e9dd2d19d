"""LRU entry store implementation."""

from cachetools import Cache, LRUCache  # type: ignore[import-untyped]

from querycache.core.entities.cache_entry import CacheEntry


class LRUEntryStore:
    """Fixed-capacity least-recently-used map of cache entries.

    Uses cachetools for recency tracking. Eviction is done explicitly in
    ``set`` so the evicted pair can be handed back to the caller, which
    needs it to keep the tag index consistent.
    """

    def __init__(self, maxsize: int = 1000) -> None:
        """Initialize the entry store.

        Args:
            maxsize: Maximum number of entries (at least 1).
        """
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        self._cache: LRUCache[str, CacheEntry] = LRUCache(maxsize=maxsize)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the store."""
        return int(self._cache.maxsize)

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry under key and mark it most recently used."""
        return self._cache.get(key)

    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry under key without changing its recency."""
        if key not in self._cache:
            return None
        return Cache.__getitem__(self._cache, key)

    def set(self, key: str, entry: CacheEntry) -> tuple[str, CacheEntry] | None:
        """Insert or replace an entry.

        Args:
            key: The cache key.
            entry: The entry to store.

        Returns:
            The evicted (key, entry) pair if a new key pushed the store
            over capacity, otherwise None.
        """
        evicted = None
        if key not in self._cache and len(self._cache) >= self._cache.maxsize:
            evicted = self._cache.popitem()
        self._cache[key] = entry
        return evicted

    def delete(self, key: str) -> CacheEntry | None:
        """Remove an entry unconditionally."""
        return self._cache.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""
        self._cache.clear()

    def keys(self) -> list[str]:
        """Return a snapshot of the stored keys."""
        return list(self._cache.keys())

    def __len__(self) -> int:
        """Return the number of entries in the store."""
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache
