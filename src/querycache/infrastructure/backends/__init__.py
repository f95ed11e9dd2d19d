"""Remote backend implementations.

RedisCacheBackend lives in ``querycache.infrastructure.backends.redis``
and needs the ``redis`` extra.
"""

from querycache.infrastructure.backends.memory import InMemoryCacheBackend

__all__ = ["InMemoryCacheBackend"]
