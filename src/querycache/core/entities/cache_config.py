"""Cache configuration entity."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

from querycache.utils.ttl import to_timedelta

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the query cache and the
    multi-layer cache, including TTL defaults, size limits and the
    remote layer connection.

    TTLs may be given as timedelta or as a number of milliseconds; they
    are normalised to timedelta on construction.
    """

    enabled: bool = True
    default_ttl: timedelta | float | None = None
    max_size: int = 1000
    key_prefix: str = "querycache"

    # Memory layer of the multi-layer cache
    memory_ttl: timedelta | float | None = None
    memory_max_size: int = 500

    # Remote layer
    use_remote: bool = True
    redis_url: str | None = None

    def __post_init__(self) -> None:
        """Apply defaults and validate sizes."""
        self.default_ttl = to_timedelta(self.default_ttl, timedelta(minutes=5))
        self.memory_ttl = to_timedelta(self.memory_ttl, timedelta(minutes=1))

        if self.max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {self.max_size}")
        if self.memory_max_size < 1:
            raise ValueError(
                f"memory_max_size must be at least 1, got {self.memory_max_size}"
            )

    @property
    def remote_enabled(self) -> bool:
        """Whether a remote layer should be built."""
        return self.use_remote and bool(self.redis_url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CacheConfig":
        """Build a configuration from environment variables.

        Recognised variables: ``QUERYCACHE_ENABLED``, ``QUERYCACHE_MAX_SIZE``,
        ``QUERYCACHE_DEFAULT_TTL_MS``, ``QUERYCACHE_KEY_PREFIX``,
        ``REDIS_URL`` and ``APP_ENV`` (falling back to ``NODE_ENV``).
        Production environments get a larger memory layer.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A new CacheConfig instance.
        """
        env = os.environ if environ is None else environ

        app_env = env.get("APP_ENV") or env.get("NODE_ENV") or "development"
        production = app_env.lower() == "production"

        default_ttl: float | None = None
        if env.get("QUERYCACHE_DEFAULT_TTL_MS"):
            default_ttl = float(env["QUERYCACHE_DEFAULT_TTL_MS"])

        return cls(
            enabled=env.get("QUERYCACHE_ENABLED", "true").lower() in _TRUE_VALUES,
            default_ttl=default_ttl,
            max_size=int(env.get("QUERYCACHE_MAX_SIZE", "1000")),
            key_prefix=env.get("QUERYCACHE_KEY_PREFIX", "querycache"),
            memory_max_size=1000 if production else 500,
            redis_url=env.get("REDIS_URL") or None,
        )
