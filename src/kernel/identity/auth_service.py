"""
Authentication service: registration and login.
"""

import uuid
from typing import Dict

from src.kernel.errors import (
    ConstraintViolation,
    CorruptCredential,
    DuplicateEmail,
    DuplicateUsername,
    InactiveAccount,
    InvalidCredentials,
)
from src.kernel.identity.jwt import TokenIssuer
from src.kernel.identity.password import PasswordHasher
from src.kernel.models.base import utcnow
from src.kernel.models.user import User
from src.kernel.users.directory import to_view
from src.kernel.users.repository import UserRepository
from src.logging_config import get_logger
from src.schemas.auth import AuthResult, LoginRequest, RegisterRequest

logger = get_logger(__name__)

# One throwaway hash per cost factor, verified against for unknown usernames
_dummy_hashes: Dict[int, str] = {}


class AuthService:
    """
    Service for credential operations.

    Each call is stateless and runs its checks in a fixed order. The password
    hash never leaves this service: results carry a UserView only.
    """

    def __init__(
        self,
        repository: UserRepository,
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ):
        self.repository = repository
        self.hasher = hasher
        self.token_issuer = token_issuer

    async def register(self, request: RegisterRequest) -> AuthResult:
        """
        Register a new user and issue a token.

        Both uniqueness checks run before anything is written. They are
        advisory: a concurrent registration can still win the race, in which
        case the store's unique constraint rejects our commit and the
        violation is reported as the matching duplicate error.
        """
        username = request.username.strip()
        email = request.email.strip()

        if await self.repository.exists_by_username(username):
            return AuthResult.failed(DuplicateUsername())
        if await self.repository.exists_by_email(email):
            return AuthResult.failed(DuplicateEmail())

        user = User(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=await self.hasher.hash_async(request.password),
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            date_of_birth=request.date_of_birth,
            is_active=True,
            created_at=utcnow(),
        )

        try:
            await self.repository.insert(user)
            await self.repository.commit()
        except ConstraintViolation:
            await self.repository.rollback()
            logger.info("Registration lost uniqueness race", extra={"username": username})
            return AuthResult.failed(await self._classify_duplicate(username, email))

        logger.info("User registered", extra={"user_id": str(user.id), "username": username})
        token = self.token_issuer.issue(user.id, user.username, user.email)
        return AuthResult.ok("User registered successfully", token, to_view(user))

    async def login(self, request: LoginRequest) -> AuthResult:
        """
        Authenticate by username and password.

        Unknown username and wrong password produce the same result. An
        inactive account is reported distinctly, but only after the password
        has been verified.

        Raises:
            CorruptCredential: If the stored hash for the user is unreadable
        """
        user = await self.repository.find_by_username(request.username.strip())

        if user is None:
            # Spend the same hashing time as a real check
            await self.hasher.verify_async(request.password, await self._get_dummy_hash())
            return AuthResult.failed(InvalidCredentials())

        try:
            verified = await self.hasher.verify_async(request.password, user.password_hash)
        except CorruptCredential:
            logger.error("Stored password hash is unreadable", extra={"user_id": str(user.id)})
            raise

        if not verified:
            return AuthResult.failed(InvalidCredentials())

        if not user.is_active:
            return AuthResult.failed(InactiveAccount())

        token = self.token_issuer.issue(user.id, user.username, user.email)
        return AuthResult.ok("Login successful", token, to_view(user))

    async def _classify_duplicate(self, username: str, email: str):
        if await self.repository.exists_by_username(username):
            return DuplicateUsername()
        if await self.repository.exists_by_email(email):
            return DuplicateEmail()
        raise ConstraintViolation()

    async def _get_dummy_hash(self) -> str:
        rounds = self.hasher.rounds
        if rounds not in _dummy_hashes:
            _dummy_hashes[rounds] = await self.hasher.hash_async(uuid.uuid4().hex)
        return _dummy_hashes[rounds]
