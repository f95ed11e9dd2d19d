"""Default key builder implementation."""

from collections.abc import Callable, Mapping
from typing import Any

from querycache.utils.hashing import hash_value


class DefaultKeyBuilder:
    """Builds colon-separated cache keys.

    Keys for explicit parts look like ``prefix:part:part``. Keys for
    function calls hash the bound arguments so equal calls share a key.
    """

    def __init__(self, prefix: str = "querycache", separator: str = ":") -> None:
        """Initialize the key builder.

        Args:
            prefix: Prefix for all cache keys. Empty for no prefix.
            separator: String placed between key parts.
        """
        self._prefix = prefix
        self._separator = separator

    @property
    def prefix(self) -> str:
        return self._prefix

    def build(self, *parts: Any) -> str:
        """Join the prefix and parts into a key.

        None parts are skipped.
        """
        items = [self._prefix] if self._prefix else []
        items.extend(str(part) for part in parts if part is not None)
        return self._separator.join(items)

    def build_call_key(
        self,
        func: Callable[..., Any],
        arguments: Mapping[str, Any] | None = None,
    ) -> str:
        """Build a key for a call of func with bound arguments.

        Args:
            func: The function being cached.
            arguments: Argument names mapped to values.

        Returns:
            A key of the form ``prefix:module:qualname[:a:<hash>]``.
        """
        module = (func.__module__ or "default").split(".")[-1]
        name = getattr(func, "__qualname__", func.__name__)

        if arguments:
            return self.build(module, name, f"a:{hash_value(dict(arguments))}")
        return self.build(module, name)
