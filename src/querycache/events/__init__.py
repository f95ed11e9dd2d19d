"""Event portal cache presets."""

from querycache.events.cache import EventCache
from querycache.events.keys import (
    CACHE_PREFIXES,
    CacheDurations,
    CacheKeys,
    CacheTags,
    build_key,
)

__all__ = [
    "EventCache",
    "CACHE_PREFIXES",
    "CacheDurations",
    "CacheKeys",
    "CacheTags",
    "build_key",
]
