"""Domain services for querycache."""

from querycache.core.services.invalidation_queue import InvalidationQueue
from querycache.core.services.multi_layer import MultiLayerCache
from querycache.core.services.query_cache import QueryCache
from querycache.core.services.tag_index import TagIndex

__all__ = [
    "QueryCache",
    "TagIndex",
    "MultiLayerCache",
    "InvalidationQueue",
]
