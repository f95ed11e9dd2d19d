"""Hashing utilities for cache key generation."""

import hashlib
import json
from typing import Any


def hash_value(value: Any) -> str:
    """Create a deterministic hash of a value.

    Args:
        value: Any JSON-serializable value.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    if value is None:
        return "none"

    # Sorted keys so equal mappings hash equally
    normalized = json.dumps(value, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]
