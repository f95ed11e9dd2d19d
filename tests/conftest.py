"""Pytest configuration for querycache tests."""

from datetime import datetime, timedelta, timezone

import pytest

from querycache import CacheConfig, QueryCache


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class CountingQuery:
    """Async zero-argument query that counts its invocations."""

    def __init__(self, result: object = "value") -> None:
        self.result = result
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        return self.result


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def query_cache(clock: FakeClock) -> QueryCache:
    """Create a query cache on the fake clock."""
    return QueryCache(CacheConfig(max_size=100), clock=clock)


@pytest.fixture
def make_query() -> type[CountingQuery]:
    """Factory for counting queries."""
    return CountingQuery
