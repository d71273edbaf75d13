"""
User directory schemas.
"""

import uuid
from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserView(BaseModel):
    """
    Public projection of a user.

    The only user representation allowed in API responses and cache entries;
    it has no field for the password hash.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    date_of_birth: date
    is_active: bool
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is stored in UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class UpdateUserRequest(BaseModel):
    """User profile update request."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date

