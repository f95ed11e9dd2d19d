"""Cache statistics entities."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class CacheStats:
    """Read-only snapshot of a QueryCache.

    Attributes:
        size: Current number of entries.
        max_size: Configured capacity.
        tags: Number of tags currently in the tag index.
        hits: Number of fresh lookups served from the cache.
        misses: Number of lookups that had to compute.
        evictions: Number of entries evicted by capacity pressure.
        in_flight: Number of keys with a computation in progress.
    """

    size: int
    max_size: int
    tags: int
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    in_flight: int = 0

    @property
    def utilization(self) -> float:
        """Fraction of the capacity in use."""
        if self.max_size <= 0:
            return 0.0
        return self.size / self.max_size

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from the cache."""
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to a dictionary for JSON serialization."""
        result = asdict(self)
        result["utilization"] = round(self.utilization, 4)
        result["hit_rate"] = round(self.hit_rate, 4)
        return result


@dataclass(frozen=True)
class MultiLayerStats:
    """Counters of a MultiLayerCache.

    ``hit_rate`` counts memory and remote hits against all memory lookups.
    """

    memory_hits: int
    memory_misses: int
    remote_hits: int
    remote_misses: int
    computes: int
    memory_size: int
    memory_max_size: int
    remote_available: bool

    @property
    def total_requests(self) -> int:
        return self.memory_hits + self.memory_misses

    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return round((self.memory_hits + self.remote_hits) / self.total_requests, 2)

    @property
    def memory_utilization(self) -> float:
        if self.memory_max_size <= 0:
            return 0.0
        return self.memory_size / self.memory_max_size

    @property
    def efficiency(self) -> float:
        """Percentage of lookups answered by either cache layer."""
        lookups = (
            self.memory_hits + self.memory_misses + self.remote_hits + self.remote_misses
        )
        if lookups == 0:
            return 0.0
        return (self.memory_hits + self.remote_hits) / lookups * 100

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["hit_rate"] = self.hit_rate
        return result
