"""
Credential store adapter: persistence and queries for user records.
"""

import uuid
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import ConstraintViolation, StoreUnavailable
from src.kernel.models.user import User
from src.logging_config import get_logger

logger = get_logger(__name__)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """
    Map driver errors onto the kernel taxonomy.

    Uniqueness/constraint failures become ConstraintViolation; every other
    DBAPI failure (connection refused, timeout, lost connection) becomes
    StoreUnavailable.
    """
    try:
        yield
    except IntegrityError as e:
        logger.info("Store rejected write", extra={"operation": operation, "error": str(e.orig)})
        raise ConstraintViolation() from e
    except DBAPIError as e:
        logger.error("Store operation failed", extra={"operation": operation, "error": str(e)})
        raise StoreUnavailable() from e


class UserRepository:
    """
    Queries and writes for the users table over a single AsyncSession.

    Write methods only stage changes; ``commit`` ends the unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        with translate_store_errors("find_by_id"):
            return await self.session.get(User, user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        with translate_store_errors("find_by_username"):
            result = await self.session.execute(
                select(User).where(User.username == username)
            )
            return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        """Emails are stored as submitted and matched case-insensitively."""
        with translate_store_errors("find_by_email"):
            result = await self.session.execute(
                select(User).where(func.lower(User.email) == email.lower())
            )
            return result.scalar_one_or_none()

    async def exists_by_username(self, username: str) -> bool:
        with translate_store_errors("exists_by_username"):
            result = await self.session.execute(
                select(exists().where(User.username == username))
            )
            return bool(result.scalar())

    async def exists_by_email(self, email: str) -> bool:
        with translate_store_errors("exists_by_email"):
            result = await self.session.execute(
                select(exists().where(func.lower(User.email) == email.lower()))
            )
            return bool(result.scalar())

    async def list_all(self) -> List[User]:
        with translate_store_errors("list_all"):
            result = await self.session.execute(
                select(User).order_by(User.created_at, User.username)
            )
            return list(result.scalars().all())

    async def filter(
        self,
        name: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[User]:
        """
        Filter users by name substring and date-of-birth range.

        Args:
            name: Case-insensitive substring of first or last name
            from_date: Inclusive lower bound on date of birth
            to_date: Inclusive upper bound on date of birth
        """
        query = select(User)
        if name:
            # Match the name literally, not as a LIKE pattern
            escaped = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            query = query.where(
                or_(
                    User.first_name.ilike(pattern, escape="\\"),
                    User.last_name.ilike(pattern, escape="\\"),
                )
            )
        if from_date is not None:
            query = query.where(User.date_of_birth >= from_date)
        if to_date is not None:
            query = query.where(User.date_of_birth <= to_date)
        query = query.order_by(User.created_at, User.username)

        with translate_store_errors("filter"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def insert(self, user: User) -> User:
        with translate_store_errors("insert"):
            self.session.add(user)
            await self.session.flush()
        return user

    async def update(self, user: User) -> User:
        with translate_store_errors("update"):
            await self.session.flush()
        return user

    async def delete(self, user: User) -> None:
        with translate_store_errors("delete"):
            await self.session.delete(user)
            await self.session.flush()

    async def commit(self) -> None:
        with translate_store_errors("commit"):
            await self.session.commit()

    async def rollback(self) -> None:
        with translate_store_errors("rollback"):
            await self.session.rollback()

