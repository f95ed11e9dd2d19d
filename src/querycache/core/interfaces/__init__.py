"""Core interfaces (Protocol classes) for querycache."""

from querycache.core.interfaces.cache_backend import ICacheBackend
from querycache.core.interfaces.entry_store import IEntryStore
from querycache.core.interfaces.invalidator import IInvalidator
from querycache.core.interfaces.serializer import ISerializer

__all__ = [
    "ICacheBackend",
    "IEntryStore",
    "IInvalidator",
    "ISerializer",
]
