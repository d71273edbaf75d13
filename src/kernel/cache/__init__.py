"""
Key-value cache backends.
"""

from src.kernel.cache.redis import (
    CacheBackend,
    RedisCache,
    get_cache_backend,
    set_cache_backend,
)

__all__ = [
    "CacheBackend",
    "RedisCache",
    "get_cache_backend",
    "set_cache_backend",
]
