"""
Authentication schemas.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from src.schemas.user import UserView


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date


class LoginRequest(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class AuthResult(BaseModel):
    """Outcome of a register or login call. Never carries the password or its hash."""

    success: bool
    message: str
    token: Optional[str] = None
    user: Optional[UserView] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, message: str, token: str, user: UserView) -> "AuthResult":
        return cls(success=True, message=message, token=token, user=user)

    @classmethod
    def failed(cls, error) -> "AuthResult":
        """Build a failure result from a DomainError."""
        return cls(success=False, message=error.public_message, error_code=error.error_code)
