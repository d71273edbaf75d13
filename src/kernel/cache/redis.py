"""Redis cache backend with connection pooling and graceful fallback."""

from typing import Optional, Protocol

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from src.kernel.errors import CacheUnavailable
from src.logging_config import get_logger

logger = get_logger(__name__)


class CacheBackend(Protocol):
    """
    String key-value store with per-key absolute expiry.

    Implementations raise CacheUnavailable when the backend cannot be reached.
    """

    async def get_string(self, key: str) -> Optional[str]: ...

    async def set_string(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def remove(self, key: str) -> None: ...


class RedisCache:
    """
    Async Redis cache backend.

    When Redis is disabled by configuration or failed to connect at startup,
    every read is a miss and writes are no-ops. Errors from a connected
    client surface as CacheUnavailable so callers can decide how to degrade.
    """

    def __init__(
        self,
        url: str,
        enabled: bool = True,
        pool_size: int = 20,
        socket_timeout: Optional[float] = 2.0,
    ) -> None:
        self._url = url
        self._enabled = enabled
        self._pool_size = pool_size
        self._socket_timeout = socket_timeout
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None

    async def connect(self) -> None:
        """Initialize the connection pool and verify connectivity."""
        if not self._enabled:
            logger.info("Redis disabled by configuration")
            return
        try:
            self._pool = ConnectionPool.from_url(
                self._url,
                max_connections=self._pool_size,
                socket_timeout=self._socket_timeout,
                socket_connect_timeout=self._socket_timeout,
                decode_responses=True,
            )
            self._client = Redis(connection_pool=self._pool)
            await self._client.ping()
            logger.info("Redis connected")
        except RedisError as e:
            logger.warning("Redis connection failed, cache disabled: %s", e)
            self._client = None
            self._pool = None

    async def close(self) -> None:
        """Close the connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._pool = None
            logger.info("Redis connection closed")

    async def ping(self) -> bool:
        if not self._client:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def get_string(self, key: str) -> Optional[str]:
        if not self._client:
            return None
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheUnavailable(f"Redis GET failed: {e}") from e

    async def set_string(self, key: str, value: str, ttl_seconds: int) -> None:
        if not self._client:
            return
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise CacheUnavailable(f"Redis SET failed: {e}") from e

    async def remove(self, key: str) -> None:
        if not self._client:
            return
        try:
            await self._client.delete(key)
        except RedisError as e:
            raise CacheUnavailable(f"Redis DEL failed: {e}") from e


class _CacheState:
    """Container for the process-wide cache backend."""

    backend: Optional[CacheBackend] = None


_state = _CacheState()


def get_cache_backend() -> Optional[CacheBackend]:
    """Get the backend installed during application startup."""
    return _state.backend


def set_cache_backend(backend: Optional[CacheBackend]) -> None:
    """Install (or clear) the process-wide backend."""
    _state.backend = backend
