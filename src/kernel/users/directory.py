"""
Cache-aside read path for user records.
"""

import uuid
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.kernel.cache.redis import CacheBackend
from src.kernel.errors import CacheUnavailable
from src.kernel.models.user import User
from src.kernel.users.repository import UserRepository
from src.logging_config import get_logger
from src.schemas.user import UserView

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "user:"
DEFAULT_CACHE_TTL_SECONDS = 30 * 60


def cache_key(user_id: uuid.UUID) -> str:
    return f"{CACHE_KEY_PREFIX}{user_id}"


def to_view(user: User) -> UserView:
    """Project a stored user onto its public view."""
    return UserView.model_validate(user)


class CachedUserDirectory:
    """
    Read-through cache of UserView keyed by user id.

    Reads check the cache first and fall back to the store, populating the
    cache with a fixed absolute TTL. Lookups that find nothing are never
    cached. Mutations go to the store and must call ``invalidate`` after
    their commit; entries are removed, never rewritten in place.

    Cache backend failures degrade to a miss and never fail the request.
    """

    def __init__(
        self,
        repository: UserRepository,
        cache: Optional[CacheBackend],
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ):
        self.repository = repository
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[UserView]:
        """
        Get a user view, serving from cache when possible.

        Returns:
            The UserView, or None if no such user exists in the store
        """
        key = cache_key(user_id)

        cached = await self._read(key)
        if cached is not None:
            logger.debug("user_cache_hit", extra={"user_id": str(user_id)})
            return cached

        logger.debug("user_cache_miss", extra={"user_id": str(user_id)})
        user = await self.repository.find_by_id(user_id)
        if user is None:
            return None

        view = to_view(user)
        await self._write(key, view)
        return view

    async def invalidate(self, user_id: uuid.UUID) -> None:
        """Remove the cached entry for a user. Idempotent."""
        if self.cache is None:
            return
        try:
            await self.cache.remove(cache_key(user_id))
            logger.debug("user_cache_invalidate", extra={"user_id": str(user_id)})
        except CacheUnavailable as e:
            # The entry will still age out after ttl_seconds
            logger.warning(
                "Cache invalidation failed",
                extra={"user_id": str(user_id), "error": e.message},
            )

    async def _read(self, key: str) -> Optional[UserView]:
        if self.cache is None:
            return None
        try:
            data = await self.cache.get_string(key)
        except CacheUnavailable as e:
            logger.warning("Cache read failed, treating as miss", extra={"key": key, "error": e.message})
            return None
        if not data:
            return None
        try:
            return UserView.model_validate_json(data)
        except PydanticValidationError:
            logger.warning("Discarding undecodable cache entry", extra={"key": key})
            return None

    async def _write(self, key: str, view: UserView) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set_string(key, view.model_dump_json(), self.ttl_seconds)
        except CacheUnavailable as e:
            logger.warning("Cache write failed", extra={"key": key, "error": e.message})
