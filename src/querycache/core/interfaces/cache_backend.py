"""Remote cache backend interface."""

from datetime import timedelta
from typing import Protocol


class ICacheBackend(Protocol):
    """Contract for the remote layer of MultiLayerCache.

    Backends store serialized bytes. Methods are async to support
    both in-process and networked implementations. Implementations
    raise CacheBackendError when the store cannot be reached.
    """

    async def get(self, key: str) -> bytes | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value as bytes, or None if not found or expired.
        """
        ...

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
            ttl: Optional time-to-live. If None, uses backend default.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete cached value.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        ...

    async def clear(self) -> None:
        """Clear all cached values."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob pattern.

        Returns:
            Number of keys deleted.
        """
        ...

    def is_available(self) -> bool:
        """Whether the backend is currently usable."""
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""
        ...
