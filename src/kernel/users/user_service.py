"""
User management operations: lookups, listing, update and delete.
"""

import uuid
from datetime import date
from typing import List, Optional

from src.kernel.errors import ValidationError
from src.kernel.models.base import utcnow
from src.kernel.users.directory import CachedUserDirectory, to_view
from src.kernel.users.repository import UserRepository
from src.logging_config import get_logger
from src.schemas.user import UpdateUserRequest, UserView

logger = get_logger(__name__)


class UserService:
    """
    Service for user directory operations.

    Owns every mutation of a stored user, and therefore every cache
    invalidation. Not-found is reported as ``None`` / ``False``.
    """

    def __init__(self, repository: UserRepository, directory: CachedUserDirectory):
        self.repository = repository
        self.directory = directory

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[UserView]:
        """Read a user straight from the store."""
        user = await self.repository.find_by_id(user_id)
        return to_view(user) if user else None

    async def get_user_by_id_cached(self, user_id: uuid.UUID) -> Optional[UserView]:
        """Read a user through the cache-aside directory."""
        return await self.directory.get_by_id(user_id)

    async def list_users(
        self,
        name: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[UserView]:
        """
        List users, optionally filtered. Always reads the store.

        Args:
            name: Substring of first or last name; blank means no filter
            from_date: Earliest date of birth (inclusive)
            to_date: Latest date of birth (inclusive)

        Raises:
            ValidationError: If from_date is after to_date
        """
        if from_date is not None and to_date is not None and from_date > to_date:
            raise ValidationError("fromDate cannot be greater than toDate")

        name = name.strip() if name else None
        if not name and from_date is None and to_date is None:
            users = await self.repository.list_all()
        else:
            users = await self.repository.filter(name, from_date, to_date)
        return [to_view(user) for user in users]

    async def update_user(
        self,
        user_id: uuid.UUID,
        data: UpdateUserRequest,
    ) -> Optional[UserView]:
        """
        Update a user's names and date of birth.

        The cache entry is invalidated only after the commit succeeds, so a
        concurrent reader can never repopulate it with pre-commit data.

        Returns:
            Updated view, or None if the user does not exist
        """
        user = await self.repository.find_by_id(user_id)
        if user is None:
            return None

        user.first_name = data.first_name.strip()
        user.last_name = data.last_name.strip()
        user.date_of_birth = data.date_of_birth
        user.updated_at = utcnow()

        await self.repository.update(user)
        await self.repository.commit()
        await self.directory.invalidate(user_id)

        logger.info("User updated", extra={"user_id": str(user_id)})
        return to_view(user)

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """
        Delete a user and purge its cache entry.

        Returns:
            True if deleted, False if the user does not exist
        """
        user = await self.repository.find_by_id(user_id)
        if user is None:
            return False

        await self.repository.delete(user)
        await self.repository.commit()
        await self.directory.invalidate(user_id)

        logger.info("User deleted", extra={"user_id": str(user_id)})
        return True
