"""Tests for key, tag and pattern invalidation."""

import pytest

from querycache import QueryCache


async def fill(cache: QueryCache, make_query, entries: dict[str, list[str]]) -> None:
    """Cache one value per key with the given tags."""
    for key, tags in entries.items():
        await cache.get(key, make_query(key), tags=tags)


class TestInvalidateKey:
    """Tests for single key invalidation."""

    @pytest.mark.asyncio
    async def test_invalidate_removes_entry_and_tags(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"k": ["t1", "t2"], "other": ["t2"]})

        assert query_cache.invalidate("k") == 1

        assert "k" not in query_cache
        assert query_cache.keys_for_tag("t1") == set()
        assert query_cache.keys_for_tag("t2") == {"other"}

    @pytest.mark.asyncio
    async def test_invalidate_forces_recompute(self, query_cache, make_query) -> None:
        query = make_query()
        await query_cache.get("k", query)

        query_cache.invalidate("k")
        await query_cache.get("k", query)

        assert query.calls == 2

    def test_invalidate_unknown_key(self, query_cache) -> None:
        assert query_cache.invalidate("missing") == 0


class TestInvalidateByTag:
    """Tests for tag invalidation."""

    @pytest.mark.asyncio
    async def test_tag_invalidation_scope(self, query_cache, make_query) -> None:
        """Only entries carrying the tag are removed."""
        await fill(
            query_cache,
            make_query,
            {"x": ["T1"], "y": ["T1", "T2"], "z": ["T2"]},
        )

        assert query_cache.invalidate_by_tag("T1") == 2

        assert "x" not in query_cache
        assert "y" not in query_cache

        z_query = make_query("recomputed")
        assert await query_cache.get("z", z_query) == "z"
        assert z_query.calls == 0

    @pytest.mark.asyncio
    async def test_tag_index_consistent_after_invalidation(
        self, query_cache, make_query
    ) -> None:
        await fill(query_cache, make_query, {"x": ["T1"], "y": ["T1", "T2"], "z": ["T2"]})

        query_cache.invalidate_by_tag("T1")

        assert query_cache.keys_for_tag("T1") == set()
        assert query_cache.keys_for_tag("T2") == {"z"}
        assert query_cache.stats().tags == 1

    @pytest.mark.asyncio
    async def test_removes_stale_and_fresh_members(
        self, query_cache, clock, make_query
    ) -> None:
        await query_cache.get("short", make_query(), ttl=1000, tags=["events"])
        await query_cache.get("long", make_query(), ttl=60000, tags=["events"])
        clock.advance(seconds=5)

        assert query_cache.invalidate_by_tag("events") == 2

    def test_unknown_tag(self, query_cache) -> None:
        assert query_cache.invalidate_by_tag("missing") == 0


class TestInvalidatePattern:
    """Tests for pattern invalidation."""

    @pytest.mark.asyncio
    async def test_pattern_removes_matching_keys(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"user:1": [], "user:2": [], "event:1": []})

        assert query_cache.invalidate_pattern("user:*") == 2

        assert "user:1" not in query_cache
        assert "user:2" not in query_cache
        assert "event:1" in query_cache

    @pytest.mark.asyncio
    async def test_pattern_matches_whole_key(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"event:1:counts": [], "event:1:counts:old": []})

        query_cache.invalidate_pattern("event:1:counts")

        assert "event:1:counts" not in query_cache
        assert "event:1:counts:old" in query_cache

    @pytest.mark.asyncio
    async def test_multiple_wildcards(self, query_cache, make_query) -> None:
        await fill(
            query_cache,
            make_query,
            {"event:1:stats": [], "event:2:stats": [], "event:2:details": []},
        )

        assert query_cache.invalidate_pattern("event:*:stats") == 2
        assert "event:2:details" in query_cache

    @pytest.mark.asyncio
    async def test_regex_characters_are_literal(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"a.b": [], "axb": []})

        query_cache.invalidate_pattern("a.b")

        assert "a.b" not in query_cache
        assert "axb" in query_cache

    @pytest.mark.asyncio
    async def test_star_clears_everything(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"a": ["t"], "b": []})

        assert query_cache.invalidate_pattern("*") == 2
        assert query_cache.stats().size == 0
        assert query_cache.stats().tags == 0

    @pytest.mark.asyncio
    async def test_pattern_cleans_tags(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"user:1": ["users"], "event:1": ["events"]})

        query_cache.invalidate_pattern("user:*")

        assert query_cache.keys_for_tag("users") == set()
        assert query_cache.keys_for_tag("events") == {"event:1"}


class TestClear:
    """Tests for clearing the cache."""

    @pytest.mark.asyncio
    async def test_clear_empties_store_and_index(self, query_cache, make_query) -> None:
        await fill(query_cache, make_query, {"a": ["t1"], "b": ["t2"]})

        query_cache.clear()

        stats = query_cache.stats()
        assert stats.size == 0
        assert stats.tags == 0


class TestDegeneratePatterns:
    """Tests for patterns that select every key."""

    def test_empty_pattern_clears_everything(self, query_cache: QueryCache) -> None:
        query_cache.set("a", 1, tags=["t"])
        query_cache.set("b", 2)

        assert query_cache.invalidate_pattern("") == 2

        assert query_cache.stats().size == 0
        assert query_cache.keys_for_tag("t") == set()
