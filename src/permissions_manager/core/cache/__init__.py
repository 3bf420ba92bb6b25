"""Cache module for resolved-permission caching.

Provides:
- The PermissionRegistrar interface and its in-memory and Redis backends
- Redis client connection management
"""

from permissions_manager.core.cache.redis import close_redis_pool, redis_client
from permissions_manager.core.cache.registrar import (
    InMemoryPermissionRegistrar,
    PermissionRegistrar,
    RedisPermissionRegistrar,
    get_registrar,
)


__all__ = [
    "InMemoryPermissionRegistrar",
    "PermissionRegistrar",
    "RedisPermissionRegistrar",
    "close_redis_pool",
    "get_registrar",
    "redis_client",
]
