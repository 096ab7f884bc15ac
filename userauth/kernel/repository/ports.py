"""
Persistence port for user rows.

The account services only talk to this protocol. Lookups report a missing
row as ``None``; a duplicate email on write raises ``DuplicateEmailError``.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, field_validator

from userauth.kernel.models.base import as_utc

UserId = Union[uuid.UUID, str]


class DuplicateEmailError(Exception):
    """Raised by a repository when a write would duplicate an email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already in use: {email}")


class UserRecord(BaseModel):
    """A full user row as read from the store, credential hash included."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    password_hash: str
    role: str
    verified: bool = False
    available: bool = True
    password_changed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @field_validator("password_changed_at", "created_at", "updated_at", "deleted_at")
    @classmethod
    def _ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class UserRepository(Protocol):
    """Abstract storage for user accounts."""

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact-match lookup; includes retired rows."""
        ...

    async def find_by_id(self, user_id: UserId) -> Optional[UserRecord]:
        """Lookup by id; includes retired rows."""
        ...

    async def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: str,
        verified: bool = False,
    ) -> UserRecord:
        ...

    async def update(self, user_id: UserId, **changes: Any) -> Optional[UserRecord]:
        """Apply ``changes`` in one atomic write and return the new row."""
        ...

    async def retire(self, user_id: UserId) -> bool:
        """Soft delete: mark the row unavailable."""
        ...

    async def purge(self, user_id: UserId) -> bool:
        """Physically delete the row."""
        ...

    async def count(self, *, available: bool = True) -> int:
        ...

    async def list(
        self,
        *,
        available: bool = True,
        skip: int = 0,
        take: int = 10,
    ) -> list[UserRecord]:
        """Rows ordered by creation time, oldest first."""
        ...


def coerce_user_id(user_id: UserId) -> Optional[uuid.UUID]:
    """Parse an id, returning None for anything that is not a UUID."""
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None
