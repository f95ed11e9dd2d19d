"""Multi-layer cache - memory layer in front of a remote layer."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import timedelta
from typing import Any, TypeVar

from querycache.core.entities.cache_config import CacheConfig
from querycache.core.entities.cache_stats import MultiLayerStats
from querycache.core.errors import CacheBackendError, SerializationError
from querycache.core.interfaces.cache_backend import ICacheBackend
from querycache.core.interfaces.serializer import ISerializer
from querycache.core.services.query_cache import Clock, QueryCache
from querycache.infrastructure.serializers.json import JsonSerializer
from querycache.utils.patterns import to_glob
from querycache.utils.ttl import to_timedelta

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MultiLayerCache:
    """Two cache layers in front of a compute function.

    Lookups go to the memory layer (a QueryCache with a short TTL),
    then to the remote layer, and finally to the compute function. A
    value found in the remote layer is copied into memory; a computed
    value is written to both.

    Remote failures are logged and treated as misses, so a broken remote
    store only costs latency. Compute failures propagate unchanged.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        remote: ICacheBackend | None = None,
        serializer: ISerializer | None = None,
        memory: QueryCache | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the multi-layer cache.

        Args:
            config: Cache configuration. Uses defaults if not provided.
            remote: Optional remote backend. Without one only the memory
                layer is used.
            serializer: Serializer for remote values. Defaults to JSON.
            memory: Memory layer. Defaults to a QueryCache sized by
                ``config.memory_max_size``.
            clock: Clock for the default memory layer.
        """
        self._config = config or CacheConfig()
        self._remote = remote
        self._serializer = serializer or JsonSerializer()
        self._memory = memory or QueryCache(
            CacheConfig(
                enabled=self._config.enabled,
                default_ttl=self._config.memory_ttl,
                max_size=self._config.memory_max_size,
                key_prefix=self._config.key_prefix,
            ),
            clock=clock,
        )

        # Statistics
        self._remote_hits = 0
        self._remote_misses = 0
        self._computes = 0

    @property
    def memory(self) -> QueryCache:
        """The memory layer."""
        return self._memory

    @property
    def remote(self) -> ICacheBackend | None:
        """The remote layer, if configured."""
        return self._remote

    async def get(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        *,
        ttl: timedelta | float | None = None,
        tags: Iterable[str] | None = None,
        use_remote: bool = True,
    ) -> T:
        """Return the value for key from the fastest layer that has it.

        Args:
            key: The cache key.
            compute: Zero-argument coroutine function producing the value.
            ttl: TTL for the remote layer. Defaults to
                ``config.default_ttl``. The memory layer keeps values for
                at most ``config.memory_ttl``.
            tags: Tags to register the value under.
            use_remote: Whether to read and write the remote layer.

        Returns:
            The cached or freshly computed value.
        """
        remote_ttl = to_timedelta(ttl, self._config.default_ttl)  # type: ignore[arg-type]
        memory_ttl = min(remote_ttl, self._config.memory_ttl)  # type: ignore[type-var]
        tag_list = list(tags) if tags else []

        async def load() -> T:
            if self._uses_remote(use_remote):
                found, value = await self._remote_get(key)
                if found:
                    return value  # type: ignore[no-any-return]

            self._computes += 1
            value = await compute()

            if self._uses_remote(use_remote):
                await self._remote_set(key, value, remote_ttl)
            return value

        return await self._memory.get(key, load, ttl=memory_ttl, tags=tag_list)

    async def set(
        self,
        key: str,
        value: Any,
        *,
        ttl: timedelta | float | None = None,
        tags: Iterable[str] | None = None,
        use_remote: bool = True,
    ) -> None:
        """Store a value in every enabled layer."""
        self._memory.set(key, value, tags=tags)

        if self._uses_remote(use_remote):
            remote_ttl = to_timedelta(ttl, self._config.default_ttl)  # type: ignore[arg-type]
            await self._remote_set(key, value, remote_ttl)

    async def invalidate(self, key: str) -> int:
        """Remove key from both layers.

        Returns:
            Number of memory entries removed (0 or 1).
        """
        count = self._memory.invalidate(key)
        await self._remote_delete([key])
        return count

    async def invalidate_by_tag(self, tag: str) -> int:
        """Remove every value registered under tag from both layers.

        The remote layer has no tag index of its own; keys are taken
        from the memory layer's index.

        Returns:
            Number of memory entries removed.
        """
        keys = self._memory.keys_for_tag(tag)
        count = self._memory.invalidate_by_tag(tag)
        await self._remote_delete(sorted(keys))
        return count

    async def invalidate_pattern(self, pattern: str) -> int:
        """Remove every key matching pattern from both layers.

        Returns:
            Number of memory entries removed.
        """
        count = self._memory.invalidate_pattern(pattern)

        if self._remote is not None:
            try:
                await self._remote.delete_pattern(to_glob(pattern))
            except CacheBackendError as e:
                logger.warning("Remote pattern invalidation failed for %r: %s", pattern, e)

        return count

    def clear(self) -> None:
        """Clear the memory layer."""
        self._memory.clear()

    async def clear_all(self) -> None:
        """Clear the memory layer and the remote layer."""
        self._memory.clear()
        if self._remote is not None:
            try:
                await self._remote.clear()
            except CacheBackendError as e:
                logger.warning("Remote clear failed: %s", e)

    def stats(self) -> MultiLayerStats:
        """Return layer counters and memory usage."""
        memory = self._memory.stats()
        return MultiLayerStats(
            memory_hits=memory.hits,
            memory_misses=memory.misses,
            remote_hits=self._remote_hits,
            remote_misses=self._remote_misses,
            computes=self._computes,
            memory_size=memory.size,
            memory_max_size=memory.max_size,
            remote_available=self._remote_available(),
        )

    def _uses_remote(self, use_remote: bool) -> bool:
        return use_remote and self._config.use_remote and self._remote is not None

    def _remote_available(self) -> bool:
        return self._remote is not None and self._remote.is_available()

    async def _remote_get(self, key: str) -> tuple[bool, Any]:
        """Read key from the remote layer.

        Returns:
            (True, value) on a remote hit, (False, None) otherwise.
        """
        if self._remote is None:
            return False, None
        try:
            data = await self._remote.get(key)
            value = self._serializer.deserialize(data) if data is not None else None
        except (CacheBackendError, SerializationError) as e:
            logger.warning("Remote get failed for %s: %s", key, e)
            return False, None

        if data is None:
            self._remote_misses += 1
            return False, None

        self._remote_hits += 1
        logger.debug("Remote hit for %s", key)
        return True, value

    async def _remote_set(self, key: str, value: Any, ttl: timedelta) -> None:
        if self._remote is None:
            return
        try:
            await self._remote.set(key, self._serializer.serialize(value), ttl)
        except (CacheBackendError, SerializationError) as e:
            logger.warning("Remote set failed for %s: %s", key, e)

    async def _remote_delete(self, keys: list[str]) -> None:
        if self._remote is None:
            return
        for key in keys:
            try:
                await self._remote.delete(key)
            except CacheBackendError as e:
                logger.warning("Remote delete failed for %s: %s", key, e)
