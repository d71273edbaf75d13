"""
Kernel Layer

Foundational components of the user directory service:
- Identity Core (password hashing, access tokens, registration and login)
- User directory (store adapter, cache-aside reads, user management)
- Cache backends

Invariants:
- A password hash never leaves the identity core
- Cache entries are invalidated only after the store commit they follow
- Cache failures degrade to a miss, never to a failed request
"""

from src.kernel.models import User
from src.kernel.errors import DomainError

__all__ = [
    "User",
    "DomainError",
]
