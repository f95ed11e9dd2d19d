"""Cache invalidator interface."""

from typing import Protocol


class IInvalidator(Protocol):
    """Contract for caches that support async group invalidation.

    Used by InvalidationQueue to flush batched tag and pattern
    invalidations.
    """

    async def invalidate_by_tag(self, tag: str) -> int:
        """Invalidate every entry carrying tag.

        Returns:
            Number of entries invalidated.
        """
        ...

    async def invalidate_pattern(self, pattern: str) -> int:
        """Invalidate every entry whose key matches pattern.

        Returns:
            Number of entries invalidated.
        """
        ...
