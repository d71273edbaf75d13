"""
Identity Core - password hashing, access tokens and authentication.
"""

from src.kernel.identity.password import (
    PasswordHasher,
    get_password_hasher,
    hash_password,
    verify_password,
)
from src.kernel.identity.jwt import AccessTokenPayload, TokenIssuer
from src.kernel.identity.auth_service import AuthService

__all__ = [
    "PasswordHasher",
    "get_password_hasher",
    "hash_password",
    "verify_password",
    "AccessTokenPayload",
    "TokenIssuer",
    "AuthService",
]
