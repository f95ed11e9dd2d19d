"""Exception hierarchy for querycache."""


class QueryCacheError(Exception):
    """Base class for all querycache errors."""

    pass


class CacheBackendError(QueryCacheError):
    """Raised when a remote cache backend cannot complete an operation."""

    pass


class SerializationError(QueryCacheError):
    """Raised when serialization or deserialization fails."""

    pass


class InvalidTTLError(QueryCacheError, ValueError):
    """Raised when a TTL is negative or not a duration."""

    pass
