"""Core domain layer for querycache."""

from querycache.core.entities import CacheConfig, CacheEntry, CacheStats, MultiLayerStats
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

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "MultiLayerStats",
    # Errors
    "QueryCacheError",
    "CacheBackendError",
    "SerializationError",
    "InvalidTTLError",
    # Interfaces
    "ICacheBackend",
    "IEntryStore",
    "IInvalidator",
    "ISerializer",
    # Services
    "QueryCache",
    "TagIndex",
    "MultiLayerCache",
    "InvalidationQueue",
]
