"""Cache entry entity."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds a computed query result together with the instant it was
    computed and the tags it is registered under for group invalidation.
    Freshness is not stored; it is derived from ``timestamp`` and the TTL
    supplied by the reader.
    """

    key: str
    data: Any
    timestamp: datetime
    tags: tuple[str, ...] = ()

    def age(self, now: datetime | None = None) -> timedelta:
        """Return how long ago this entry was computed.

        Args:
            now: Reference instant. Defaults to the current UTC time.

        Returns:
            The age of the entry.
        """
        now = now or datetime.now(timezone.utc)
        return now - self.timestamp

    def is_fresh(self, ttl: timedelta, now: datetime | None = None) -> bool:
        """Check whether the entry is younger than ``ttl``.

        Args:
            ttl: Maximum age for the entry to count as fresh.
            now: Reference instant. Defaults to the current UTC time.

        Returns:
            True if the entry may be served, False if it is stale.
        """
        return self.age(now) < ttl

    @classmethod
    def create(
        cls,
        key: str,
        data: Any,
        tags: list[str] | tuple[str, ...] | None = None,
        timestamp: datetime | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            data: The value to cache.
            tags: Optional tags for invalidation. Duplicates are dropped,
                order is kept.
            timestamp: Creation instant. Defaults to the current UTC time.

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            data=data,
            timestamp=timestamp or datetime.now(timezone.utc),
            tags=tuple(dict.fromkeys(tags)) if tags else (),
        )
