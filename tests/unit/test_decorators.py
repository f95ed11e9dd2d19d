"""Tests for the cached and invalidates decorators."""

from datetime import timedelta

import pytest

from querycache import CacheConfig, MultiLayerCache, QueryCache, cached, invalidates


class TestCached:
    """Tests for @cached."""

    @pytest.mark.asyncio
    async def test_caches_by_template_key(self, query_cache: QueryCache) -> None:
        calls = []

        @cached(query_cache, key="event:{event_id}:details", tags=["event:{event_id}"])
        async def get_event(event_id: str) -> dict:
            calls.append(event_id)
            return {"id": event_id}

        assert await get_event("42") == {"id": "42"}
        assert await get_event("42") == {"id": "42"}
        assert await get_event(event_id="7") == {"id": "7"}

        assert calls == ["42", "7"]
        assert "event:42:details" in query_cache
        assert query_cache.keys_for_tag("event:42") == {"event:42:details"}

    @pytest.mark.asyncio
    async def test_template_uses_defaults(self, query_cache: QueryCache) -> None:
        @cached(query_cache, key="events:list:{country}:{page}")
        async def list_events(country: str, page: int = 1) -> list:
            return []

        await list_events("SG")

        assert "events:list:SG:1" in query_cache

    @pytest.mark.asyncio
    async def test_callable_key(self, query_cache: QueryCache) -> None:
        @cached(query_cache, key=lambda phone: f"phone:{phone[-4:]}:orders")
        async def orders_by_phone(phone: str) -> list:
            return ["order"]

        await orders_by_phone("+6591234567")

        assert "phone:4567:orders" in query_cache

    @pytest.mark.asyncio
    async def test_generated_key_distinguishes_arguments(self, query_cache: QueryCache) -> None:
        calls = 0

        @cached(query_cache)
        async def attendees(event_id: str) -> list:
            nonlocal calls
            calls += 1
            return [event_id]

        await attendees("1")
        await attendees("1")
        await attendees("2")

        assert calls == 2
        assert all(key.startswith("querycache:test_decorators:") for key in query_cache._store.keys())

    @pytest.mark.asyncio
    async def test_ttl(self, query_cache: QueryCache, clock) -> None:
        calls = 0

        @cached(query_cache, key="counts", ttl=timedelta(seconds=30))
        async def counts() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await counts() == 1
        clock.advance(seconds=29)
        assert await counts() == 1
        clock.advance(seconds=2)
        assert await counts() == 2

    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, query_cache: QueryCache) -> None:
        attempts = 0

        @cached(query_cache, key="flaky")
        async def flaky() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("database timeout")
            return "ok"

        with pytest.raises(RuntimeError):
            await flaky()
        assert await flaky() == "ok"

    @pytest.mark.asyncio
    async def test_with_multi_layer_cache(self) -> None:
        cache = MultiLayerCache(CacheConfig(key_prefix="portal"))

        @cached(cache)
        async def categories() -> list:
            return ["music"]

        assert await categories() == ["music"]
        assert await categories() == ["music"]

        assert cache.stats().computes == 1
        assert all(key.startswith("portal:") for key in cache.memory._store.keys())

    @pytest.mark.asyncio
    async def test_preserves_metadata(self, query_cache: QueryCache) -> None:
        @cached(query_cache, key="k")
        async def documented() -> None:
            """Docs."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docs."


class TestInvalidates:
    """Tests for @invalidates."""

    @pytest.mark.asyncio
    async def test_invalidates_after_call(self, query_cache: QueryCache) -> None:
        query_cache.set("event:42:details", {}, tags=["event:42"])
        query_cache.set("events:list:SG:all:1", [])
        query_cache.set("order:9:details", {})

        @invalidates(
            query_cache,
            tags=["event:{event_id}"],
            keys=["order:{order_id}:details"],
            patterns=["events:list:*"],
        )
        async def update_event(event_id: str, order_id: str) -> str:
            return "updated"

        assert await update_event("42", order_id="9") == "updated"
        assert len(query_cache) == 0

    @pytest.mark.asyncio
    async def test_nothing_invalidated_on_error(self, query_cache: QueryCache) -> None:
        query_cache.set("event:42:details", {}, tags=["event:42"])

        @invalidates(query_cache, tags=["event:{event_id}"])
        async def update_event(event_id: str) -> None:
            raise RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await update_event("42")

        assert "event:42:details" in query_cache

    @pytest.mark.asyncio
    async def test_with_multi_layer_cache(self) -> None:
        cache = MultiLayerCache()
        cache.memory.set("user:1:registrations", [], tags=["user:1"])

        @invalidates(cache, tags=["user:{user_id}"])
        async def register(user_id: str) -> None:
            return None

        await register("1")

        assert "user:1:registrations" not in cache.memory
