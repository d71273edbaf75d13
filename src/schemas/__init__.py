"""
Pydantic schemas for API request/response validation.
"""

from src.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResult,
)
from src.schemas.user import (
    UserView,
    UpdateUserRequest,
)
from src.schemas.common import (
    ApiResponse,
    ErrorResponse,
    FieldError,
    HealthResponse,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "AuthResult",
    # Users
    "UserView",
    "UpdateUserRequest",
    # Common
    "ApiResponse",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
]
