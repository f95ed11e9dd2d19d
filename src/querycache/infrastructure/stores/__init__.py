"""Entry store implementations."""

from querycache.infrastructure.stores.lru import LRUEntryStore

__all__ = ["LRUEntryStore"]
