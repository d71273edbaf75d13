"""
Password hashing utilities using bcrypt.
"""

import asyncio
from typing import Optional

import bcrypt

from src.kernel.errors import CorruptCredential

# Default cost factor, roughly 100ms per hash on commodity hardware
DEFAULT_ROUNDS = 11

# bcrypt only uses the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

_BCRYPT_PREFIXES = (b"$2a$", b"$2b$", b"$2y$")
_BCRYPT_HASH_LENGTH = 60


class PasswordHasher:
    """
    Salted one-way password hashing.

    The salt and cost factor are embedded in the hash string, so no separate
    salt storage is needed. The sync methods are CPU-bound by design; async
    callers should use ``hash_async`` / ``verify_async`` so the work runs in a
    worker thread instead of the event loop.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        return password.encode("utf-8")[:MAX_PASSWORD_BYTES]

    @staticmethod
    def _parse_hash(hashed_password: str) -> bytes:
        """Encode a stored hash, raising CorruptCredential if it is not bcrypt."""
        try:
            hash_bytes = hashed_password.encode("utf-8")
        except (AttributeError, UnicodeEncodeError) as e:
            raise CorruptCredential() from e
        if len(hash_bytes) != _BCRYPT_HASH_LENGTH or not hash_bytes.startswith(_BCRYPT_PREFIXES):
            raise CorruptCredential()
        return hash_bytes

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Self-describing hash string ($2b$<rounds>$<salt+digest>)
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._truncate_password(password), salt)
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash in constant time.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise

        Raises:
            CorruptCredential: If the stored hash is not a readable bcrypt hash
        """
        hash_bytes = self._parse_hash(hashed_password)
        try:
            return bcrypt.checkpw(self._truncate_password(plain_password), hash_bytes)
        except ValueError as e:
            # bcrypt rejects salts it cannot decode ("Invalid salt")
            raise CorruptCredential() from e

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)


_password_hasher: Optional[PasswordHasher] = None


def get_password_hasher() -> PasswordHasher:
    """Get or create the default hasher, using the configured cost factor."""
    global _password_hasher
    if _password_hasher is None:
        from src.config import get_settings

        _password_hasher = PasswordHasher(rounds=get_settings().bcrypt_rounds)
    return _password_hasher


# Convenience functions
def hash_password(password: str) -> str:
    """Hash a password."""
    return get_password_hasher().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return get_password_hasher().verify(plain_password, hashed_password)
