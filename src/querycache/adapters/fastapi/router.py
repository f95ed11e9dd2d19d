"""FastAPI router exposing cache statistics and an admin clear."""

import hmac
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Response

from querycache.core.entities.cache_stats import CacheStats, MultiLayerStats
from querycache.core.services.multi_layer import MultiLayerCache
from querycache.core.services.query_cache import QueryCache

logger = logging.getLogger(__name__)

NO_STORE = "no-store, no-cache, must-revalidate"


def create_cache_router(
    query_cache: QueryCache,
    *,
    multi_layer: MultiLayerCache | None = None,
    admin_key: str | None = None,
    prefix: str = "/cache",
) -> APIRouter:
    """Create a router for cache monitoring.

    Routes:
        GET {prefix}/stats: statistics and tuning recommendations.
        DELETE {prefix}?key=...: clear the in-memory caches. Requires
            ``key`` to equal ``admin_key``; without an admin key every
            request is rejected.

    Args:
        query_cache: The application's query cache.
        multi_layer: The application's multi-layer cache, if any.
        admin_key: Secret required to clear the caches.
        prefix: URL prefix for the routes.

    Returns:
        An APIRouter to include in the application.
    """
    router = APIRouter(prefix=prefix, tags=["cache"])

    @router.get("/stats")
    async def get_stats(response: Response) -> dict[str, Any]:
        query_stats = query_cache.stats()
        multi_stats = multi_layer.stats() if multi_layer is not None else None

        body: dict[str, Any] = {
            "timestamp": _now(),
            "query_cache": {
                **query_stats.to_dict(),
                "utilization_rate": query_stats.utilization,
            },
            "recommendations": recommendations(query_stats, multi_stats),
        }
        if multi_stats is not None:
            body["multi_layer"] = {
                **multi_stats.to_dict(),
                "efficiency": {
                    "hit_rate": multi_stats.hit_rate,
                    "memory_utilization": multi_stats.memory_utilization,
                    "total_requests": multi_stats.total_requests,
                    "cache_efficiency": multi_stats.efficiency,
                },
            }
            body["remote"] = {
                "available": multi_stats.remote_available,
                "status": "connected" if multi_stats.remote_available else "disconnected",
            }

        response.headers["Cache-Control"] = NO_STORE
        return body

    @router.delete("")
    async def clear_caches(key: str | None = Query(default=None)) -> dict[str, Any]:
        if admin_key is None or key is None or not hmac.compare_digest(key, admin_key):
            raise HTTPException(status_code=401, detail="Unauthorized")

        query_cache.clear()
        if multi_layer is not None:
            multi_layer.clear()

        logger.info("All in-memory caches cleared via admin endpoint")
        return {
            "message": "All caches cleared successfully",
            "timestamp": _now(),
        }

    return router


def recommendations(
    query_stats: CacheStats,
    multi_stats: MultiLayerStats | None = None,
) -> list[str]:
    """Suggest configuration changes based on cache statistics."""
    result: list[str] = []

    if multi_stats is not None:
        if multi_stats.memory_utilization > 0.9:
            result.append("Consider increasing memory cache size")
        if multi_stats.total_requests and multi_stats.hit_rate < 0.5:
            result.append("Low cache hit rate - consider adjusting TTL values")
        if not multi_stats.remote_available:
            result.append(
                "Remote cache is not available - consider setting up Redis "
                "for better performance"
            )

    if query_stats.utilization > 0.8:
        result.append("Query cache is nearly full - consider increasing capacity")

    return result


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
