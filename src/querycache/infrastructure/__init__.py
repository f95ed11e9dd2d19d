"""Infrastructure layer implementations for querycache."""

from querycache.infrastructure.backends import InMemoryCacheBackend
from querycache.infrastructure.key_builders import DefaultKeyBuilder
from querycache.infrastructure.serializers import JsonSerializer
from querycache.infrastructure.stores import LRUEntryStore

__all__ = [
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
    "JsonSerializer",
    "LRUEntryStore",
]
