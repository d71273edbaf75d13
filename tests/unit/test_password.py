"""Unit tests for password hashing."""

import pytest

from src.kernel.errors import CorruptCredential
from src.kernel.identity.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self, hasher: PasswordHasher):
        """Same password should create different hashes (due to salt)."""
        password = "pw123456"
        hash1 = hasher.hash(password)
        hash2 = hasher.hash(password)

        assert hash1 != hash2
        assert hash1.startswith("$2b$04$")  # bcrypt prefix with cost factor

    def test_verify_correct_password(self, hasher: PasswordHasher):
        """Correct password should verify successfully."""
        hashed = hasher.hash("pw123456")

        assert hasher.verify("pw123456", hashed) is True

    def test_verify_wrong_password(self, hasher: PasswordHasher):
        """Wrong password should fail verification, not raise."""
        hashed = hasher.hash("pw123456")

        assert hasher.verify("wrongpw", hashed) is False

    def test_hash_does_not_contain_password(self, hasher: PasswordHasher):
        assert "pw123456" not in hasher.hash("pw123456")

    @pytest.mark.parametrize(
        "stored",
        [
            "",
            "not-a-hash",
            "$argon2id$v=19$m=65536,t=3,p=4$c29tZXNhbHQ$abc",
            "$2b$04$" + "!" * 53,
        ],
    )
    def test_malformed_hash_raises_corrupt_credential(self, hasher: PasswordHasher, stored: str):
        """A foreign or damaged hash is a data problem, not a failed login."""
        with pytest.raises(CorruptCredential):
            hasher.verify("pw123456", stored)

    def test_long_passwords_truncated_consistently(self, hasher: PasswordHasher):
        """bcrypt only looks at 72 bytes; hash and verify must agree on that."""
        password = "a" * 100
        hashed = hasher.hash(password)

        assert hasher.verify(password, hashed) is True
        assert hasher.verify("a" * 72, hashed) is True

    @pytest.mark.asyncio
    async def test_async_wrappers(self, hasher: PasswordHasher):
        hashed = await hasher.hash_async("pw123456")

        assert await hasher.verify_async("pw123456", hashed) is True
        assert await hasher.verify_async("nope", hashed) is False

    def test_convenience_functions(self):
        """hash_password/verify_password use the configured cost factor."""
        hashed = hash_password("pw123456")

        assert hashed.startswith("$2b$04$")
        assert verify_password("pw123456", hashed) is True
        assert verify_password("wrong", hashed) is False
