"""Batched, debounced cache invalidation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from querycache.core.errors import CacheBackendError
from querycache.core.interfaces.invalidator import IInvalidator

logger = logging.getLogger(__name__)


class InvalidationQueue:
    """Collects tag and pattern invalidations and applies them in batches.

    Writes often trigger several overlapping invalidations in quick
    succession. Queued items are applied after a short quiet period,
    tags first and then patterns, a batch at a time with a pause in
    between so a burst does not monopolise the event loop.

    Example:
        queue = InvalidationQueue(multi_layer_cache)
        queue.queue_tags(["events", "event:42"])
        queue.queue_patterns(["events:list:*"])
        ...
        await queue.flush()  # or let the scheduled flush run
    """

    def __init__(
        self,
        cache: IInvalidator,
        *,
        delay: float = 0.1,
        tag_batch_size: int = 10,
        pattern_batch_size: int = 5,
        batch_pause: float = 0.05,
    ) -> None:
        """Initialize the queue.

        Args:
            cache: Cache to invalidate.
            delay: Quiet period in seconds before a scheduled flush.
            tag_batch_size: Tags invalidated concurrently per batch.
            pattern_batch_size: Patterns invalidated concurrently per batch.
            batch_pause: Pause in seconds between batches.
        """
        self._cache = cache
        self._delay = delay
        self._tag_batch_size = max(tag_batch_size, 1)
        self._pattern_batch_size = max(pattern_batch_size, 1)
        self._batch_pause = batch_pause

        self._tags: list[str] = []
        self._patterns: list[str] = []
        self._processing = False
        self._scheduled: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[int] | None = None

    def queue_tags(self, tags: Iterable[str]) -> None:
        """Queue tags for invalidation and schedule a flush.

        Must be called from a running event loop.
        """
        self._tags.extend(tags)
        self._schedule()

    def queue_patterns(self, patterns: Iterable[str]) -> None:
        """Queue key patterns for invalidation and schedule a flush.

        Must be called from a running event loop.
        """
        self._patterns.extend(patterns)
        self._schedule()

    async def flush(self) -> int:
        """Apply everything queued so far.

        Items queued while a flush is running are picked up by that
        flush. Concurrent calls return 0 immediately.

        Returns:
            Number of entries invalidated.
        """
        if self._processing:
            return 0

        self._cancel_scheduled()
        self._processing = True
        count = 0
        try:
            while self._tags or self._patterns:
                count += await self._drain(
                    self._tags, self._tag_batch_size, self._cache.invalidate_by_tag
                )
                count += await self._drain(
                    self._patterns,
                    self._pattern_batch_size,
                    self._cache.invalidate_pattern,
                )
        finally:
            self._processing = False

        return count

    def invalidate_event(self, event_id: str) -> None:
        """Queue everything derived from one event."""
        self.queue_tags([f"event:{event_id}", "events", "event-list"])
        self.queue_patterns(["events:list:*"])

    def invalidate_user(self, user_id: str) -> None:
        self.queue_tags([f"user:{user_id}", "user-data"])

    def invalidate_order(self, order_id: str) -> None:
        self.queue_tags([f"order:{order_id}", "orders", "registrations"])

    def invalidate_all_events(self) -> None:
        """Queue every event detail and listing, e.g. after a bulk import."""
        self.queue_tags(["events", "event-list"])
        self.queue_patterns(["events:*", "admin:events:*"])

    def status(self) -> dict[str, Any]:
        """Return queue lengths and whether a flush is running."""
        return {
            "tag_queue": len(self._tags),
            "pattern_queue": len(self._patterns),
            "is_processing": self._processing,
        }

    def clear(self) -> None:
        """Drop everything queued and cancel the scheduled flush."""
        self._tags.clear()
        self._patterns.clear()
        self._cancel_scheduled()

    async def _drain(
        self,
        queue: list[str],
        batch_size: int,
        invalidate: Callable[[str], Awaitable[int]],
    ) -> int:
        count = 0
        while queue:
            batch = list(dict.fromkeys(queue[:batch_size]))
            del queue[:batch_size]

            results = await asyncio.gather(
                *(self._apply(invalidate, item) for item in batch)
            )
            count += sum(results)

            if queue:
                await asyncio.sleep(self._batch_pause)
        return count

    async def _apply(self, invalidate: Callable[[str], Awaitable[int]], item: str) -> int:
        try:
            return await invalidate(item)
        except CacheBackendError as e:
            logger.warning("Failed to invalidate %r: %s", item, e)
            return 0

    def _schedule(self) -> None:
        if self._processing:
            return
        self._cancel_scheduled()
        loop = asyncio.get_running_loop()
        self._scheduled = loop.call_later(self._delay, self._start_flush)

    def _start_flush(self) -> None:
        self._scheduled = None
        self._task = asyncio.get_running_loop().create_task(self.flush())
        self._task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: "asyncio.Task[int]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled invalidation flush failed", exc_info=exc)
        else:
            logger.debug("Scheduled invalidation flush removed %d entries", task.result())

    def _cancel_scheduled(self) -> None:
        if self._scheduled is not None:
            self._scheduled.cancel()
            self._scheduled = None
