"""
Error taxonomy for the identity and user directory kernel.

Domain errors carry a message that is safe to show to clients, a stable
error code and the HTTP status the API boundary should use. Infrastructure
errors (store/cache unavailable, corrupt credentials) carry a generic public
message; their detail is only ever logged server-side.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all errors raised by the kernel."""

    error_code: str = "error"
    status_code: int = 400
    default_message: str = "Request failed"
    # Whether the message may be returned to the client as-is
    expose: bool = True

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message if self.expose else "Internal server error"


class ValidationError(DomainError):
    """Bad input shape, e.g. from_date after to_date."""

    error_code = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class DuplicateUsername(DomainError):
    error_code = "duplicate_username"
    status_code = 400
    default_message = "Username already exists"


class DuplicateEmail(DomainError):
    error_code = "duplicate_email"
    status_code = 400
    default_message = "Email already exists"


class InvalidCredentials(DomainError):
    """Covers both unknown username and wrong password."""

    error_code = "invalid_credentials"
    status_code = 401
    default_message = "Invalid username or password"


class InactiveAccount(DomainError):
    error_code = "inactive_account"
    status_code = 401
    default_message = "User account is inactive"


class NotFound(DomainError):
    error_code = "not_found"
    status_code = 404
    default_message = "User not found"


class InvalidToken(DomainError):
    error_code = "invalid_token"
    status_code = 401
    default_message = "Invalid or expired token"


class ConstraintViolation(DomainError):
    """Store-level rejection of a write that breaks a uniqueness guarantee."""

    error_code = "constraint_violation"
    status_code = 409
    default_message = "Write conflicts with an existing record"


class CorruptCredential(DomainError):
    """A stored password hash could not be parsed."""

    error_code = "corrupt_credential"
    status_code = 500
    default_message = "Stored credential is unreadable"
    expose = False


class StoreUnavailable(DomainError):
    error_code = "store_unavailable"
    status_code = 500
    default_message = "Persistent store unavailable"
    expose = False


class CacheUnavailable(DomainError):
    error_code = "cache_unavailable"
    status_code = 500
    default_message = "Cache backend unavailable"
    expose = False
