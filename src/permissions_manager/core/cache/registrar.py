"""Permission registrar: the process-wide cache of resolved permissions.

Permission checks resolve a principal's effective permission names once
and keep the result in the registrar. Every committed mutation of roles,
permissions or assignments calls ``invalidate()``, which drops every
resolved entry at once. There is no selective invalidation.
"""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

import structlog

from permissions_manager.config import settings
from permissions_manager.core.cache.redis import redis_client
from permissions_manager.core.constants import CACHE_NAMESPACE


logger = structlog.get_logger()

RedisClientFactory = Callable[[], AbstractAsyncContextManager[Any]]


@runtime_checkable
class PermissionRegistrar(Protocol):
    """Interface of the resolved-permission cache."""

    async def get_resolved(self, principal_id: str, guard_name: str) -> set[str] | None:
        """Return cached permission names, or None on a miss."""
        ...

    async def store_resolved(
        self, principal_id: str, guard_name: str, names: set[str]
    ) -> None:
        """Cache the resolved permission names for a principal."""
        ...

    async def invalidate(self) -> None:
        """Drop every cached resolution."""
        ...


class InMemoryPermissionRegistrar:
    """Registrar keeping resolutions in a process-local dictionary."""

    def __init__(self) -> None:
        self._resolved: dict[tuple[str, str], frozenset[str]] = {}
        self.invalidations = 0

    async def get_resolved(self, principal_id: str, guard_name: str) -> set[str] | None:
        names = self._resolved.get((guard_name, principal_id))
        return set(names) if names is not None else None

    async def store_resolved(
        self, principal_id: str, guard_name: str, names: set[str]
    ) -> None:
        self._resolved[(guard_name, principal_id)] = frozenset(names)

    async def invalidate(self) -> None:
        dropped = len(self._resolved)
        self._resolved.clear()
        self.invalidations += 1
        logger.debug("registrar_invalidated", backend="memory", dropped=dropped)


class RedisPermissionRegistrar:
    """Registrar sharing resolutions across processes through Redis.

    Entries live under ``<prefix>resolved:<guard>:<principal>`` and are
    removed together by scanning the namespace on invalidation.
    """

    def __init__(
        self,
        prefix: str = "",
        ttl_seconds: int = 3600,
        client: RedisClientFactory = redis_client,
    ) -> None:
        """Initialize the registrar.

        Args:
            prefix: Prefix for all keys (e.g., "permissions-manager:")
            ttl_seconds: Lifetime of a cached resolution
            client: Factory returning an async Redis client context manager
        """
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds
        self._client = client

    def _key(self, principal_id: str, guard_name: str) -> str:
        return f"{self.prefix}{CACHE_NAMESPACE}:{guard_name}:{principal_id}"

    async def get_resolved(self, principal_id: str, guard_name: str) -> set[str] | None:
        async with self._client() as client:
            raw = await client.get(self._key(principal_id, guard_name))
        if raw is None:
            return None
        return set(json.loads(raw))

    async def store_resolved(
        self, principal_id: str, guard_name: str, names: set[str]
    ) -> None:
        async with self._client() as client:
            await client.setex(
                self._key(principal_id, guard_name),
                self.ttl_seconds,
                json.dumps(sorted(names)),
            )

    async def invalidate(self) -> None:
        pattern = f"{self.prefix}{CACHE_NAMESPACE}:*"
        dropped = 0
        async with self._client() as client:
            cursor = 0
            while True:
                cursor, keys = await client.scan(cursor=cursor, match=pattern, count=100)
                if keys:
                    dropped += await client.delete(*keys)
                if cursor == 0:
                    break
        logger.debug("registrar_invalidated", backend="redis", dropped=dropped)


@lru_cache
def get_registrar() -> PermissionRegistrar:
    """Get the process-wide registrar for the configured cache driver."""
    if settings.cache_driver == "redis":
        return RedisPermissionRegistrar(prefix=settings.cache_prefix)
    return InMemoryPermissionRegistrar()
