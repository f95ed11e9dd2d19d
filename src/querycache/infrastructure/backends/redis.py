"""Redis remote backend implementation."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import redis.asyncio as redis
from redis.exceptions import RedisError

from querycache.core.errors import CacheBackendError

logger = logging.getLogger(__name__)


class RedisCacheBackend:
    """Redis cache backend for distributed deployments.

    Supports per-key TTL and pattern deletion, and is suitable for
    multi-process deployments. Client errors are raised as
    CacheBackendError; the backend reports itself unavailable until the
    next successful command.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "querycache",
        default_ttl: int | None = 300,
        client: "redis.Redis | None" = None,
    ) -> None:
        """Initialize the Redis cache backend.

        Args:
            redis_url: Redis connection URL.
            key_prefix: Prefix for all cache keys.
            default_ttl: Default TTL in seconds.
            client: Pre-built client, used instead of redis_url.
        """
        self._redis: redis.Redis = client or redis.from_url(redis_url)  # type: ignore
        self._key_prefix = key_prefix
        self._default_ttl = default_ttl
        self._available = True

    async def get(self, key: str) -> bytes | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value as bytes, or None if not found or expired.
        """
        async with self._command("get", key):
            return await self._redis.get(self._prefixed_key(key))

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: timedelta | None = None,
    ) -> None:
        """Store value with optional TTL.

        TTLs are truncated to whole seconds, with a minimum of one.

        Args:
            key: The cache key.
            value: The value to store as bytes.
            ttl: Optional time-to-live. If None, uses default.
        """
        prefixed_key = self._prefixed_key(key)

        async with self._command("set", key):
            if ttl is not None:
                seconds = max(int(ttl.total_seconds()), 1)
                await self._redis.setex(prefixed_key, seconds, value)
            elif self._default_ttl is not None:
                await self._redis.setex(prefixed_key, self._default_ttl, value)
            else:
                await self._redis.set(prefixed_key, value)

    async def delete(self, key: str) -> bool:
        """Delete cached value.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        async with self._command("delete", key):
            result = await self._redis.delete(self._prefixed_key(key))
        return result > 0

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        async with self._command("exists", key):
            result = await self._redis.exists(self._prefixed_key(key))
        return result > 0

    async def clear(self) -> None:
        """Clear all cached values with our prefix.

        Note: This only clears keys with our prefix, not the entire Redis DB.
        """
        await self._delete_by_pattern(f"{self._key_prefix}:*")

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob pattern.

        The key prefix is applied to the pattern.

        Returns:
            Number of keys deleted.
        """
        return await self._delete_by_pattern(self._prefixed_key(pattern))

    def is_available(self) -> bool:
        """Whether the last command reached Redis."""
        return self._available

    async def _delete_by_pattern(self, pattern: str) -> int:
        """Delete keys matching a pattern using SCAN.

        Uses SCAN instead of KEYS for production safety.
        """
        count = 0
        cursor = 0

        async with self._command("delete_pattern", pattern):
            while True:
                cursor, keys = await self._redis.scan(cursor, match=pattern, count=100)

                if keys:
                    count += await self._redis.delete(*keys)

                if cursor == 0:
                    break

        return count

    @asynccontextmanager
    async def _command(self, name: str, key: str) -> AsyncIterator[None]:
        """Run a Redis command, translating client errors."""
        try:
            yield
        except RedisError as e:
            if self._available:
                logger.warning("Redis became unavailable during %s: %s", name, e)
            self._available = False
            raise CacheBackendError(f"Redis {name} failed for {key!r}: {e}") from e
        self._available = True

    def _prefixed_key(self, key: str) -> str:
        """Add prefix to key if not already present."""
        if key.startswith(f"{self._key_prefix}:"):
            return key
        return f"{self._key_prefix}:{key}"

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._redis.aclose()

    async def __aenter__(self) -> "RedisCacheBackend":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()
