"""Entry store interface."""

from typing import Protocol

from querycache.core.entities.cache_entry import CacheEntry


class IEntryStore(Protocol):
    """Contract for the bounded key to CacheEntry map behind QueryCache.

    Stores do not check freshness and do not know about tags; the
    facade keeps the tag index consistent with what the store reports.
    """

    @property
    def maxsize(self) -> int:
        """Maximum number of entries the store holds."""
        ...

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under key and mark it most recently used."""
        ...

    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry stored under key without changing its recency."""
        ...

    def set(self, key: str, entry: CacheEntry) -> tuple[str, CacheEntry] | None:
        """Insert or replace an entry.

        Returns:
            The (key, entry) pair evicted to make room, or None.
        """
        ...

    def delete(self, key: str) -> CacheEntry | None:
        """Remove an entry, returning it if it was present."""
        ...

    def clear(self) -> None:
        """Remove all entries."""
        ...

    def keys(self) -> list[str]:
        """Return a snapshot of the stored keys without touching recency."""
        ...

    def __len__(self) -> int: ...

    def __contains__(self, key: object) -> bool: ...
