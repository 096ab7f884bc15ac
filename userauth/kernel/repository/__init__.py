"""
User persistence: the repository port and its adapters.
"""

from userauth.kernel.repository.ports import (
    DuplicateEmailError,
    UserRecord,
    UserRepository,
    coerce_user_id,
)
from userauth.kernel.repository.memory import InMemoryUserRepository
from userauth.kernel.repository.sql_repository import SqlAlchemyUserRepository

__all__ = [
    "DuplicateEmailError",
    "UserRecord",
    "UserRepository",
    "coerce_user_id",
    "InMemoryUserRepository",
    "SqlAlchemyUserRepository",
]
