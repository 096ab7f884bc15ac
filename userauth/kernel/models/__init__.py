"""
Directory data models.
"""

from userauth.kernel.models.base import Base, TimestampMixin, SoftDeleteMixin, generate_uuid, utcnow, as_utc
from userauth.kernel.models.user import User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "generate_uuid",
    "utcnow",
    "as_utc",
    "User",
    "UserRole",
]
