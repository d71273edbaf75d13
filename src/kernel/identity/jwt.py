"""
JWT access token issuing and validation.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from src.config import Settings, check_secret_key
from src.kernel.errors import InvalidToken

DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


class AccessTokenPayload(BaseModel):
    """Validated access token claims."""

    sub: str  # User ID
    username: str
    email: str
    iss: str
    aud: str
    exp: datetime
    iat: datetime

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


class TokenIssuer:
    """
    Creates and verifies HMAC-SHA-256 signed access tokens.

    Issuer, audience and lifetime come from configuration; validation allows
    no clock skew.
    """

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        audience: str,
        algorithm: str = "HS256",
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
    ):
        # Raises ValueError on a short or placeholder key
        self.secret_key = check_secret_key(secret_key)
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self.token_lifetime = token_lifetime

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            algorithm=settings.algorithm,
            token_lifetime=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(
        self,
        subject_id: uuid.UUID,
        username: str,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed access token.

        Args:
            subject_id: User's unique identifier
            username: User's username
            email: User's email
            expires_delta: Optional custom lifetime (defaults to configured lifetime)

        Returns:
            Compact JWS string
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.token_lifetime)

        payload = {
            "sub": str(subject_id),
            "username": username,
            "email": email,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str) -> AccessTokenPayload:
        """
        Verify signature, issuer, audience and expiry of a token.

        Raises:
            InvalidToken: If any check fails or required claims are missing
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "leeway": 0,
                    "require_exp": True,
                    "require_iat": True,
                    "require_sub": True,
                    "require_iss": True,
                    "require_aud": True,
                },
            )
        except JWTError as e:
            raise InvalidToken() from e

        try:
            uuid.UUID(payload["sub"])
            return AccessTokenPayload(
                sub=payload["sub"],
                username=payload["username"],
                email=payload["email"],
                iss=payload["iss"],
                aud=payload["aud"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken() from e
