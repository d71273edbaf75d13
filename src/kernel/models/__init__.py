"""
Kernel Data Models

Core SQLAlchemy models for the identity store.
"""

from src.kernel.models.base import Base, CreatedAtMixin, generate_uuid, utcnow
from src.kernel.models.user import User

__all__ = [
    "Base",
    "CreatedAtMixin",
    "generate_uuid",
    "utcnow",
    "User",
]
