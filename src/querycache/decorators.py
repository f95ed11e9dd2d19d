"""Cache decorators for async query functions.

The cache is passed explicitly, so each application wires the
decorators to the cache instance it owns:

    cache = QueryCache()

    @cached(cache, key="event:{event_id}:details", tags=["event:{event_id}"])
    async def get_event(event_id: str) -> dict:
        return await db.events.find_one(event_id)

    @invalidates(cache, tags=["event:{event_id}"])
    async def update_event(event_id: str, data: dict) -> dict:
        return await db.events.update(event_id, data)
"""

import functools
import inspect
import re
from collections.abc import Callable, Iterable
from datetime import timedelta
from typing import Any, TypeVar

from querycache.core.services.multi_layer import MultiLayerCache
from querycache.core.services.query_cache import QueryCache
from querycache.infrastructure.key_builders.default import DefaultKeyBuilder

F = TypeVar("F", bound=Callable[..., Any])

Cache = QueryCache | MultiLayerCache

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def cached(
    cache: Cache,
    *,
    key: str | Callable[..., str] | None = None,
    ttl: timedelta | float | None = None,
    tags: Iterable[str] | None = None,
    key_builder: DefaultKeyBuilder | None = None,
) -> Callable[[F], F]:
    """Decorator for caching async function results.

    Args:
        cache: The QueryCache or MultiLayerCache to store results in.
        key: Cache key. A string may contain ``{arg_name}`` placeholders
            filled from the call's arguments; a callable receives the
            call's arguments and returns the key. If omitted, the key is
            built from the function's module, name and hashed arguments.
        ttl: Time-to-live, as a timedelta or milliseconds. Uses the
            cache's default if None.
        tags: Tags for invalidation. Supports ``{arg_name}`` placeholders.
        key_builder: Builder for default keys. Defaults to one using the
            cache's key prefix.

    Returns:
        Decorated function.

    Example:
        @cached(cache, ttl=timedelta(seconds=30), tags=["event:{event_id}"])
        async def registration_counts(event_id: str) -> dict:
            return await db.orders.count_by_event(event_id)
    """
    tag_templates = list(tags) if tags else []

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        builder = key_builder or DefaultKeyBuilder(prefix=_prefix_of(cache))

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            arguments = _bind(signature, args, kwargs)

            if callable(key):
                cache_key = key(*args, **kwargs)
            elif key is not None:
                cache_key = _interpolate(key, arguments)
            else:
                cache_key = builder.build_call_key(func, arguments)

            return await cache.get(
                cache_key,
                lambda: func(*args, **kwargs),
                ttl=ttl,
                tags=[_interpolate(tag, arguments) for tag in tag_templates],
            )

        return wrapper  # type: ignore

    return decorator


def invalidates(
    cache: Cache,
    *,
    tags: Iterable[str] = (),
    keys: Iterable[str] = (),
    patterns: Iterable[str] = (),
) -> Callable[[F], F]:
    """Decorator for invalidating cache entries after a write.

    Executes the decorated function and then invalidates the given keys,
    tags and patterns. Nothing is invalidated if the function raises.

    Args:
        cache: The QueryCache or MultiLayerCache to invalidate.
        tags: Tags to invalidate. Supports ``{arg_name}`` placeholders.
        keys: Keys to invalidate. Supports ``{arg_name}`` placeholders.
        patterns: Key patterns to invalidate. Supports placeholders.

    Returns:
        Decorated function.

    Example:
        @invalidates(cache, tags=["event:{event_id}"], patterns=["events:list:*"])
        async def update_event(event_id: str, data: dict) -> dict:
            return await db.events.update(event_id, data)
    """
    tag_templates = list(tags)
    key_templates = list(keys)
    pattern_templates = list(patterns)

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            # Execute function first
            result = await func(*args, **kwargs)

            arguments = _bind(signature, args, kwargs)
            for template in key_templates:
                await _maybe_await(cache.invalidate(_interpolate(template, arguments)))
            for template in tag_templates:
                await _maybe_await(
                    cache.invalidate_by_tag(_interpolate(template, arguments))
                )
            for template in pattern_templates:
                await _maybe_await(
                    cache.invalidate_pattern(_interpolate(template, arguments))
                )

            return result

        return wrapper  # type: ignore

    return decorator


def _prefix_of(cache: Cache) -> str:
    if isinstance(cache, MultiLayerCache):
        return cache.memory.config.key_prefix
    return cache.config.key_prefix


def _bind(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map a call's arguments to parameter names, defaults included."""
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def _interpolate(template: str, arguments: dict[str, Any]) -> str:
    """Fill ``{arg_name}`` placeholders; unknown names are left as is."""

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in arguments:
            return str(arguments[name])
        return match.group(0)

    return _PLACEHOLDER.sub(replacer, template)


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result
