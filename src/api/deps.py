"""
FastAPI dependencies for authentication, database sessions and services.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.database import get_db
from src.kernel.cache.redis import get_cache_backend
from src.kernel.errors import InvalidToken
from src.kernel.identity.auth_service import AuthService
from src.kernel.identity.jwt import AccessTokenPayload, TokenIssuer
from src.kernel.identity.password import PasswordHasher, get_password_hasher
from src.kernel.users.directory import CachedUserDirectory
from src.kernel.users.repository import UserRepository
from src.kernel.users.user_service import UserService


# Security scheme
security = HTTPBearer(auto_error=False)


DbSession = Annotated[AsyncSession, Depends(get_db)]


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Token issuer built once from validated settings."""
    return TokenIssuer.from_settings(get_settings())


def get_user_repository(db: DbSession) -> UserRepository:
    return UserRepository(db)


Repository = Annotated[UserRepository, Depends(get_user_repository)]


def get_auth_service(
    repository: Repository,
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    return AuthService(repository, hasher, token_issuer)


def get_user_directory(repository: Repository) -> CachedUserDirectory:
    return CachedUserDirectory(
        repository,
        get_cache_backend(),
        ttl_seconds=get_settings().cache_ttl_seconds,
    )


def get_user_service(
    repository: Repository,
    directory: Annotated[CachedUserDirectory, Depends(get_user_directory)],
) -> UserService:
    return UserService(repository, directory)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


async def get_current_claims(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AccessTokenPayload:
    """Validate the bearer token or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return token_issuer.validate(credentials.credentials)
    except InvalidToken as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


CurrentClaims = Annotated[AccessTokenPayload, Depends(get_current_claims)]
