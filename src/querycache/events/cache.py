"""Cached queries and invalidation strategies for the event portal."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from querycache.core.services.invalidation_queue import InvalidationQueue
from querycache.core.services.multi_layer import MultiLayerCache
from querycache.events.keys import CacheDurations, CacheKeys, CacheTags

T = TypeVar("T")

Query = Callable[[], Awaitable[T]]


class EventCache:
    """Portal queries routed through a MultiLayerCache.

    Each method fixes the key, TTL and tags for one kind of query; the
    caller supplies the query itself. User-specific data is kept out of
    the remote layer.

    The ``on_*`` methods invalidate what a given kind of write makes
    stale. With an InvalidationQueue they are queued and batched,
    otherwise applied immediately.
    """

    def __init__(
        self,
        cache: MultiLayerCache,
        queue: InvalidationQueue | None = None,
    ) -> None:
        self._cache = cache
        self._queue = queue

    async def get_event_details(self, event_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.event_details(event_id),
            query,
            ttl=CacheDurations.EVENT_DETAILS,
            tags=[CacheTags.EVENTS, CacheTags.event(event_id)],
        )

    async def get_event_list(
        self,
        country: str,
        query: Query[T],
        category: str | None = None,
        page: int | None = None,
    ) -> T:
        return await self._cache.get(
            CacheKeys.event_list(country, category, page),
            query,
            ttl=CacheDurations.EVENT_LIST,
            tags=[CacheTags.EVENTS, CacheTags.EVENT_LIST, CacheTags.country(country)],
        )

    async def get_registration_counts(self, event_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.event_counts(event_id),
            query,
            ttl=CacheDurations.REGISTRATION_COUNTS,
            tags=[CacheTags.REGISTRATIONS, CacheTags.event(event_id), CacheTags.COUNTS],
        )

    async def get_attendees(self, event_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.event_attendees(event_id),
            query,
            ttl=CacheDurations.ATTENDEE_LIST,
            tags=[CacheTags.ATTENDEES, CacheTags.event(event_id)],
        )

    async def get_event_stats(self, event_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.event_stats(event_id),
            query,
            ttl=CacheDurations.EVENT_STATS,
            tags=[CacheTags.COUNTS, CacheTags.event(event_id)],
        )

    async def get_user_registrations(self, user_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.user_registrations(user_id),
            query,
            ttl=CacheDurations.USER_REGISTRATIONS,
            tags=[CacheTags.USER_DATA, CacheTags.user(user_id), CacheTags.REGISTRATIONS],
            use_remote=False,
        )

    async def get_user_orders_by_phone(self, phone_number: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.user_orders_by_phone(phone_number),
            query,
            ttl=CacheDurations.USER_ORDERS,
            tags=[CacheTags.USER_DATA, CacheTags.ORDERS, CacheTags.phone(phone_number)],
            use_remote=False,
        )

    async def get_categories(self, query: Query[T], include_hidden: bool = False) -> T:
        return await self._cache.get(
            CacheKeys.categories(include_hidden),
            query,
            ttl=CacheDurations.CATEGORIES,
            tags=[CacheTags.CATEGORIES],
        )

    async def get_order_details(self, order_id: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.order_details(order_id),
            query,
            ttl=CacheDurations.USER_ORDERS,
            tags=[CacheTags.ORDERS, CacheTags.order(order_id)],
        )

    async def get_analytics(self, kind: str, period: str, query: Query[T]) -> T:
        return await self._cache.get(
            CacheKeys.analytics(kind, period),
            query,
            ttl=CacheDurations.ANALYTICS,
            tags=[CacheTags.ANALYTICS, CacheTags.analytics_kind(kind)],
        )

    async def on_event_update(self, event_id: str) -> None:
        """An event's details changed."""
        await self._invalidate(
            tags=[CacheTags.event(event_id), CacheTags.EVENT_LIST],
            patterns=["events:list:*"],
        )

    async def on_registration_change(self, event_id: str) -> None:
        """Someone registered for, cancelled or checked in to an event."""
        await self._invalidate(
            tags=[CacheTags.COUNTS, CacheTags.REGISTRATIONS],
            patterns=[
                CacheKeys.event_counts(event_id),
                CacheKeys.event_attendees(event_id),
                CacheKeys.event_stats(event_id),
            ],
        )

    async def on_user_data_change(
        self,
        user_id: str,
        phone_number: str | None = None,
    ) -> None:
        """A user's profile, registrations or orders changed."""
        tags = [CacheTags.user(user_id)]
        if phone_number:
            tags.append(CacheTags.phone(phone_number))
        await self._invalidate(tags=tags)

    async def on_category_update(self) -> None:
        await self._invalidate(tags=[CacheTags.CATEGORIES])

    async def on_major_event_update(self) -> None:
        """Drop everything derived from events, e.g. after a bulk import."""
        await self._invalidate(
            tags=[CacheTags.EVENTS, CacheTags.EVENT_LIST, CacheTags.COUNTS],
            patterns=["events:*", "admin:events:*"],
        )

    async def on_order_update(self, order_id: str) -> None:
        await self._invalidate(tags=[CacheTags.order(order_id)])

    async def _invalidate(
        self,
        tags: list[str],
        patterns: list[str] | None = None,
    ) -> None:
        if self._queue is not None:
            self._queue.queue_tags(tags)
            if patterns:
                self._queue.queue_patterns(patterns)
            return

        await asyncio.gather(
            *(self._cache.invalidate_by_tag(tag) for tag in tags),
            *(self._cache.invalidate_pattern(pattern) for pattern in patterns or ()),
        )
