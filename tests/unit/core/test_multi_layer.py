"""Tests for MultiLayerCache."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from querycache import (
    CacheBackendError,
    CacheConfig,
    InMemoryCacheBackend,
    JsonSerializer,
    MultiLayerCache,
)


@pytest.fixture
def remote() -> InMemoryCacheBackend:
    return InMemoryCacheBackend(maxsize=100)


@pytest.fixture
def layers(remote: InMemoryCacheBackend, clock) -> MultiLayerCache:
    return MultiLayerCache(CacheConfig(), remote=remote, clock=clock)


class TestLayeredGet:
    """Tests for lookups across layers."""

    @pytest.mark.asyncio
    async def test_miss_writes_both_layers(self, layers, remote, make_query) -> None:
        query = make_query({"id": "1"})

        assert await layers.get("k", query, tags=["t"]) == {"id": "1"}

        assert query.calls == 1
        assert "k" in layers.memory
        assert await remote.get("k") == JsonSerializer().serialize({"id": "1"})

    @pytest.mark.asyncio
    async def test_memory_hit(self, layers, make_query) -> None:
        query = make_query()

        await layers.get("k", query)
        await layers.get("k", query)

        stats = layers.stats()
        assert query.calls == 1
        assert stats.memory_hits == 1
        assert stats.remote_hits == 0

    @pytest.mark.asyncio
    async def test_remote_hit_after_memory_expiry(
        self, layers, clock, make_query
    ) -> None:
        """Memory keeps values for the memory TTL, remote for the full TTL."""
        query = make_query("v")

        await layers.get("k", query, ttl=timedelta(minutes=5))
        clock.advance(minutes=2)
        assert await layers.get("k", query, ttl=timedelta(minutes=5)) == "v"

        stats = layers.stats()
        assert query.calls == 1
        assert stats.remote_hits == 1
        assert stats.computes == 1

    @pytest.mark.asyncio
    async def test_use_remote_false_skips_remote(self, layers, remote, make_query) -> None:
        await layers.get("user:1:registrations", make_query(), use_remote=False)

        assert await remote.exists("user:1:registrations") is False

    @pytest.mark.asyncio
    async def test_without_remote(self, clock, make_query) -> None:
        layers = MultiLayerCache(clock=clock)
        query = make_query()

        await layers.get("k", query)
        await layers.get("k", query)

        assert query.calls == 1
        assert layers.stats().remote_available is False

    @pytest.mark.asyncio
    async def test_compute_error_propagates(self, layers, remote) -> None:
        async def failing() -> None:
            raise RuntimeError("db down")

        with pytest.raises(RuntimeError, match="db down"):
            await layers.get("k", failing)

        assert "k" not in layers.memory
        assert await remote.exists("k") is False

    @pytest.mark.asyncio
    async def test_set_writes_both_layers(self, layers, remote) -> None:
        await layers.set("k", [1, 2], tags=["t"])

        assert "k" in layers.memory
        assert await remote.exists("k") is True


class TestRemoteFailures:
    """Tests for degrading when the remote layer fails."""

    @pytest.fixture
    def broken_remote(self) -> AsyncMock:
        backend = AsyncMock()
        backend.is_available = lambda: False
        backend.get.side_effect = CacheBackendError("connection refused")
        backend.set.side_effect = CacheBackendError("connection refused")
        backend.delete.side_effect = CacheBackendError("connection refused")
        backend.delete_pattern.side_effect = CacheBackendError("connection refused")
        return backend

    @pytest.mark.asyncio
    async def test_get_falls_back_to_compute(self, broken_remote, clock, make_query) -> None:
        layers = MultiLayerCache(remote=broken_remote, clock=clock)
        query = make_query("fresh")

        assert await layers.get("k", query) == "fresh"
        assert query.calls == 1
        assert layers.stats().remote_available is False

    @pytest.mark.asyncio
    async def test_invalidation_survives_remote_errors(
        self, broken_remote, clock, make_query
    ) -> None:
        layers = MultiLayerCache(remote=broken_remote, clock=clock)
        await layers.get("event:1", make_query(), tags=["events"])

        assert await layers.invalidate_by_tag("events") == 1
        assert await layers.invalidate_pattern("event:*") == 0
        assert await layers.invalidate("event:1") == 0

    @pytest.mark.asyncio
    async def test_corrupt_remote_value_is_a_miss(self, remote, clock, make_query) -> None:
        layers = MultiLayerCache(remote=remote, clock=clock)
        await remote.set("k", b"\xff not json")
        query = make_query("recomputed")

        assert await layers.get("k", query) == "recomputed"
        assert query.calls == 1


class TestLayeredInvalidation:
    """Tests for invalidation across layers."""

    @pytest.mark.asyncio
    async def test_invalidate_by_tag_removes_remote_keys(
        self, layers, remote, make_query
    ) -> None:
        await layers.get("event:1:details", make_query(), tags=["event:1"])
        await layers.get("event:2:details", make_query(), tags=["event:2"])

        assert await layers.invalidate_by_tag("event:1") == 1

        assert await remote.exists("event:1:details") is False
        assert await remote.exists("event:2:details") is True

    @pytest.mark.asyncio
    async def test_invalidate_pattern_both_layers(self, layers, remote, make_query) -> None:
        await layers.get("events:list:SG:all:1", make_query())
        await layers.get("event:1:details", make_query())

        await layers.invalidate_pattern("events:list:*")

        assert "events:list:SG:all:1" not in layers.memory
        assert await remote.exists("events:list:SG:all:1") is False
        assert await remote.exists("event:1:details") is True

    @pytest.mark.asyncio
    async def test_glob_characters_literal_in_both_layers(
        self, layers, remote, make_query
    ) -> None:
        """Only * is a wildcard, in the remote layer too."""
        await layers.get("user:?", make_query())
        await layers.get("user:1", make_query())

        assert await layers.invalidate_pattern("user:?") == 1

        assert "user:1" in layers.memory
        assert await remote.exists("user:1") is True
        assert await remote.exists("user:?") is False

    @pytest.mark.asyncio
    async def test_remote_receives_escaped_glob(self, clock) -> None:
        remote = AsyncMock()
        remote.delete_pattern.return_value = 0
        layers = MultiLayerCache(remote=remote, clock=clock)

        await layers.invalidate_pattern("search:a?b[1]*")

        remote.delete_pattern.assert_awaited_once_with("search:a[?]b[[]1]*")

    @pytest.mark.asyncio
    async def test_empty_pattern_clears_both_layers(self, layers, remote, make_query) -> None:
        await layers.get("a", make_query())
        await layers.get("b", make_query())

        assert await layers.invalidate_pattern("") == 2

        assert len(layers.memory) == 0
        assert len(remote) == 0

    @pytest.mark.asyncio
    async def test_invalidate_key(self, layers, remote, make_query) -> None:
        await layers.get("k", make_query())

        assert await layers.invalidate("k") == 1
        assert await remote.exists("k") is False

    @pytest.mark.asyncio
    async def test_clear_keeps_remote(self, layers, remote, make_query) -> None:
        await layers.get("k", make_query())

        layers.clear()

        assert layers.memory.stats().size == 0
        assert await remote.exists("k") is True

        await layers.clear_all()
        assert await remote.exists("k") is False
