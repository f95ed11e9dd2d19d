"""TTL normalisation helpers."""

import math
from datetime import timedelta

from querycache.core.errors import InvalidTTLError


def to_timedelta(ttl: timedelta | float | None, default: timedelta) -> timedelta:
    """Normalise a TTL value.

    Numbers are interpreted as milliseconds.

    Args:
        ttl: A timedelta, a number of milliseconds, or None.
        default: Value used when ttl is None.

    Returns:
        The TTL as a timedelta.

    Raises:
        InvalidTTLError: If ttl is negative, not finite or of an unsupported
            type.
    """
    if ttl is None:
        return default
    if isinstance(ttl, bool):
        raise InvalidTTLError(f"Invalid TTL: {ttl!r}")
    if isinstance(ttl, timedelta):
        result = ttl
    elif isinstance(ttl, (int, float)):
        if not math.isfinite(ttl):
            raise InvalidTTLError(f"TTL must be finite, got {ttl!r}")
        try:
            result = timedelta(milliseconds=ttl)
        except OverflowError as e:
            raise InvalidTTLError(f"TTL out of range: {ttl!r}") from e
    else:
        raise InvalidTTLError(f"Invalid TTL: {ttl!r}")

    if result < timedelta(0):
        raise InvalidTTLError(f"TTL must not be negative, got {ttl!r}")
    return result
