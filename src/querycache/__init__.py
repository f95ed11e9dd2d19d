"""querycache - tag-aware query result caching for async Python services.

Sits in front of expensive data-store reads: results are kept in a
bounded LRU store, served while younger than their TTL, and can be
dropped by key, by tag or by key pattern. Concurrent misses for the same
key share one computation.

Example:
    from datetime import timedelta
    from querycache import CacheConfig, QueryCache

    cache = QueryCache(CacheConfig(max_size=1000))

    async def event_details(event_id: str) -> dict:
        return await cache.get(
            f"event:{event_id}:details",
            lambda: db.events.find_one({"_id": event_id}),
            ttl=timedelta(minutes=5),
            tags=["events", f"event:{event_id}"],
        )

    # after an update
    cache.invalidate_by_tag(f"event:{event_id}")
    cache.invalidate_pattern("events:list:*")

Two layers with Redis behind memory:
    from querycache import MultiLayerCache
    from querycache.infrastructure.backends.redis import RedisCacheBackend

    layers = MultiLayerCache(config, remote=RedisCacheBackend(config.redis_url))
    value = await layers.get("categories:false", load_categories, tags=["categories"])
"""

from querycache.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    MultiLayerStats,
)
from querycache.core.errors import (
    CacheBackendError,
    InvalidTTLError,
    QueryCacheError,
    SerializationError,
)
from querycache.core.interfaces import (
    ICacheBackend,
    IEntryStore,
    IInvalidator,
    ISerializer,
)
from querycache.core.services import (
    InvalidationQueue,
    MultiLayerCache,
    QueryCache,
    TagIndex,
)
from querycache.decorators import cached, invalidates
from querycache.infrastructure import (
    DefaultKeyBuilder,
    InMemoryCacheBackend,
    JsonSerializer,
    LRUEntryStore,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "MultiLayerStats",
    # Errors
    "QueryCacheError",
    "CacheBackendError",
    "SerializationError",
    "InvalidTTLError",
    # Core interfaces
    "ICacheBackend",
    "IEntryStore",
    "IInvalidator",
    "ISerializer",
    # Core services
    "QueryCache",
    "TagIndex",
    "MultiLayerCache",
    "InvalidationQueue",
    # Infrastructure implementations
    "LRUEntryStore",
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
    "JsonSerializer",
    # Decorators
    "cached",
    "invalidates",
]
