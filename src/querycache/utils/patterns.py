"""Key pattern matching for pattern invalidation."""

import re

# Bracket classes are understood the same way by fnmatch and Redis
_GLOB_ESCAPES = {"?": "[?]", "[": "[[]", "\\": "[\\\\]"}


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a simple glob into a regular expression.

    Only ``*`` is special and matches any substring, including the empty
    one. Every other character is literal and the pattern must match the
    whole key. The empty pattern matches every key.

    Args:
        pattern: The glob pattern, e.g. ``"user:*"``.

    Returns:
        A compiled regular expression to use with ``fullmatch``.
    """
    if not pattern:
        return re.compile(".*", re.DOTALL)
    parts = [re.escape(part) for part in pattern.split("*")]
    return re.compile(".*".join(parts), re.DOTALL)


def matches(pattern: str, key: str) -> bool:
    """Check whether a key matches a simple glob pattern."""
    return compile_pattern(pattern).fullmatch(key) is not None


def to_glob(pattern: str) -> str:
    """Translate a simple pattern for a backend with full glob syntax.

    ``?``, ``[`` and backslashes are escaped so that only ``*`` stays a
    wildcard, as in compile_pattern. The empty pattern becomes ``*``.

    Example:
        >>> to_glob("user:?")
        'user:[?]'
    """
    if not pattern:
        return "*"
    return "".join(_GLOB_ESCAPES.get(char, char) for char in pattern)
