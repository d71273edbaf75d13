"""
User directory: store adapter, cache-aside reads and user management.
"""

from src.kernel.users.repository import UserRepository, translate_store_errors
from src.kernel.users.directory import CachedUserDirectory, cache_key, to_view
from src.kernel.users.user_service import UserService

__all__ = [
    "UserRepository",
    "translate_store_errors",
    "CachedUserDirectory",
    "cache_key",
    "to_view",
    "UserService",
]
