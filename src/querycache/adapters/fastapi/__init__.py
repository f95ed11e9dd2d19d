"""FastAPI integration for querycache.

Example:
    from fastapi import FastAPI
    from querycache import QueryCache
    from querycache.adapters.fastapi import create_cache_router

    cache = QueryCache()
    app = FastAPI()
    app.include_router(create_cache_router(cache, admin_key=os.environ["ADMIN_CACHE_KEY"]))
"""

from querycache.adapters.fastapi.router import create_cache_router, recommendations

__all__ = ["create_cache_router", "recommendations"]
