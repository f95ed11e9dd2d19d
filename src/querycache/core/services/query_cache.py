"""Query cache - get-or-compute facade over the entry store and tag index."""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from querycache.core.entities.cache_config import CacheConfig
from querycache.core.entities.cache_entry import CacheEntry
from querycache.core.entities.cache_stats import CacheStats
from querycache.core.interfaces.entry_store import IEntryStore
from querycache.core.services.tag_index import TagIndex
from querycache.infrastructure.stores.lru import LRUEntryStore
from querycache.utils.patterns import compile_pattern
from querycache.utils.ttl import to_timedelta

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueryCache:
    """Tag-aware, time-bound LRU cache for query results.

    This is the only component callers talk to. It owns an entry store
    and a tag index and keeps them consistent: a key is listed under a
    tag exactly while the entry stored under that key carries the tag.

    Concurrent ``get`` calls for the same missing key on one event loop
    share a single computation. Store and index mutations run under a
    per-instance lock; the compute function is never awaited while the
    lock is held.

    Example:
        cache = QueryCache(CacheConfig(max_size=500))

        event = await cache.get(
            "event:42:details",
            lambda: db.events.find_one(42),
            ttl=timedelta(minutes=5),
            tags=["events", "event:42"],
        )

        cache.invalidate_by_tag("event:42")
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        store: IEntryStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the query cache.

        Args:
            config: Cache configuration. Uses defaults if not provided.
            store: Entry store. Defaults to an LRUEntryStore sized by
                ``config.max_size``. The cache takes ownership of it.
            clock: Returns the current timezone-aware time. Used for entry
                timestamps and freshness checks.
        """
        self._config = config or CacheConfig()
        self._store = store or LRUEntryStore(maxsize=self._config.max_size)
        self._tags = TagIndex()
        self._clock = clock or _utcnow
        self._lock = threading.RLock()
        self._in_flight: dict[str, asyncio.Future[Any]] = {}

        # Statistics
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    async def get(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        *,
        ttl: timedelta | float | None = None,
        tags: Iterable[str] | None = None,
    ) -> T:
        """Return the cached value for key, computing it on a miss.

        A stored entry younger than ``ttl`` is returned as is. Otherwise
        ``compute`` is awaited and its result is stored under key with
        the given tags. If ``compute`` raises, the exception propagates
        unchanged and the cache is left as it was, including any stale
        entry for key.

        Args:
            key: The cache key.
            compute: Zero-argument coroutine function producing the value.
            ttl: Maximum age of a usable entry, as a timedelta or in
                milliseconds. Defaults to ``config.default_ttl``.
            tags: Tags to register the fresh entry under.

        Returns:
            The cached or freshly computed value.
        """
        max_age = to_timedelta(ttl, self._config.default_ttl)  # type: ignore[arg-type]

        if not self._config.enabled:
            return await compute()

        with self._lock:
            entry = self._store.get(key)
            if entry is not None and entry.is_fresh(max_age, self._clock()):
                self._hits += 1
                logger.debug("Cache hit for %s", key)
                return entry.data  # type: ignore[no-any-return]

            self._misses += 1
            pending = self._in_flight.get(key)

        if pending is not None and pending.get_loop() is asyncio.get_running_loop():
            logger.debug("Joining in-flight computation for %s", key)
            return await asyncio.shield(pending)  # type: ignore[no-any-return]

        logger.debug("Cache %s for %s", "stale" if entry else "miss", key)

        with self._in_flight_slot(key) as future:
            value = await compute()
            self._write(key, value, tags)
            future.set_result(value)

        return value

    def set(
        self,
        key: str,
        value: Any,
        *,
        tags: Iterable[str] | None = None,
    ) -> CacheEntry:
        """Store a value computed elsewhere.

        Args:
            key: The cache key.
            value: The value to store.
            tags: Tags to register the entry under.

        Returns:
            The stored CacheEntry.
        """
        return self._write(key, value, tags)

    def peek(self, key: str) -> CacheEntry | None:
        """Return the stored entry for key, fresh or not, without touching it."""
        with self._lock:
            return self._store.peek(key)

    def keys_for_tag(self, tag: str) -> "set[str]":
        """Return the keys currently registered under tag."""
        with self._lock:
            return self._tags.keys_for_tag(tag)

    def invalidate(self, key: str) -> int:
        """Remove the entry for key and its tag registrations.

        Returns:
            1 if an entry was removed, 0 if key was unknown.
        """
        with self._lock:
            entry = self._store.peek(key)
            if entry is not None:
                self._unindex(entry)
            removed = self._store.delete(key)

        if removed is not None:
            logger.debug("Invalidated %s", key)
            return 1
        return 0

    def invalidate_by_tag(self, tag: str) -> int:
        """Remove every entry registered under tag, fresh or stale.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            count = sum(self.invalidate(key) for key in self._tags.keys_for_tag(tag))

        logger.debug("Invalidated %d entries tagged %s", count, tag)
        return count

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every entry whose whole key matches pattern.

        ``*`` matches any substring; all other characters are literal.
        Scans every stored key.

        Returns:
            Number of entries removed.
        """
        regex = compile_pattern(pattern)

        with self._lock:
            matched = [key for key in self._store.keys() if regex.fullmatch(key)]
            count = sum(self.invalidate(key) for key in matched)

        logger.debug("Invalidated %d entries matching %r", count, pattern)
        return count

    def clear(self) -> None:
        """Empty the entry store and the tag index."""
        with self._lock:
            self._store.clear()
            self._tags.clear()
        logger.debug("Cleared query cache")

    def stats(self) -> CacheStats:
        """Return a snapshot of the cache counters."""
        with self._lock:
            return CacheStats(
                size=len(self._store),
                max_size=self._store.maxsize,
                tags=len(self._tags),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                in_flight=len(self._in_flight),
            )

    def reset_stats(self) -> None:
        """Zero the hit, miss and eviction counters."""
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def _write(self, key: str, value: Any, tags: Iterable[str] | None) -> CacheEntry:
        """Store a fresh entry, keeping the tag index consistent."""
        entry = CacheEntry.create(
            key=key,
            data=value,
            tags=list(tags) if tags else None,
            timestamp=self._clock(),
        )

        with self._lock:
            previous = self._store.peek(key)
            if previous is not None:
                self._unindex(previous)

            evicted = self._store.set(key, entry)
            if evicted is not None:
                evicted_key, evicted_entry = evicted
                self._unindex(evicted_entry)
                self._evictions += 1
                logger.debug("Evicted %s", evicted_key)

            for tag in entry.tags:
                self._tags.associate(tag, key)

        return entry

    def _unindex(self, entry: CacheEntry) -> None:
        for tag in entry.tags:
            self._tags.dissociate(tag, entry.key)

    @contextmanager
    def _in_flight_slot(self, key: str) -> Iterator["asyncio.Future[Any]"]:
        """Publish a future for key while its computation runs.

        Callers that miss on the same key meanwhile await this future.
        The slot is released on every exit path; failures and
        cancellation are forwarded to those waiters.
        """
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        with self._lock:
            self._in_flight[key] = future

        try:
            yield future
        except Exception as e:
            future.set_exception(e)
            # Retrieve it so an unawaited future does not log a warning
            future.exception()
            raise
        except BaseException:
            # Cancellation, KeyboardInterrupt and the like
            future.cancel()
            raise
        finally:
            with self._lock:
                if self._in_flight.get(key) is future:
                    del self._in_flight[key]
