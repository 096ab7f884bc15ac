"""
Process-local user repository.

Used by tests and single-process development setups. Each method body runs
without awaiting, so every call is atomic with respect to other coroutines
on the same event loop.
"""

import builtins
import uuid
from typing import Any, Optional

from userauth.kernel.models.base import generate_uuid, utcnow
from userauth.kernel.repository.ports import (
    DuplicateEmailError,
    UserId,
    UserRecord,
    coerce_user_id,
)

_MUTABLE_FIELDS = frozenset((
    "email", "name", "password_hash", "role", "verified",
    "available", "password_changed_at", "deleted_at",
))


class InMemoryUserRepository:
    """Dict-backed implementation of ``UserRepository``."""

    def __init__(self) -> None:
        self._rows: dict[uuid.UUID, UserRecord] = {}

    def _email_taken(self, email: str, exclude: Optional[uuid.UUID] = None) -> bool:
        return any(
            row.email == email and row.id != exclude for row in self._rows.values()
        )

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        for row in self._rows.values():
            if row.email == email:
                return row.model_copy()
        return None

    async def find_by_id(self, user_id: UserId) -> Optional[UserRecord]:
        key = coerce_user_id(user_id)
        row = self._rows.get(key) if key else None
        return row.model_copy() if row else None

    async def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: str,
        verified: bool = False,
    ) -> UserRecord:
        if self._email_taken(email):
            raise DuplicateEmailError(email)
        now = utcnow()
        row = UserRecord(
            id=generate_uuid(),
            email=email,
            name=name,
            password_hash=password_hash,
            role=role,
            verified=verified,
            created_at=now,
            updated_at=now,
        )
        self._rows[row.id] = row
        return row.model_copy()

    async def update(self, user_id: UserId, **changes: Any) -> Optional[UserRecord]:
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        key = coerce_user_id(user_id)
        row = self._rows.get(key) if key else None
        if row is None:
            return None
        if "email" in changes and self._email_taken(changes["email"], exclude=row.id):
            raise DuplicateEmailError(changes["email"])
        updated = row.model_copy(update={**changes, "updated_at": utcnow()})
        self._rows[row.id] = updated
        return updated.model_copy()

    async def retire(self, user_id: UserId) -> bool:
        return await self.update(user_id, available=False, deleted_at=utcnow()) is not None

    async def purge(self, user_id: UserId) -> bool:
        key = coerce_user_id(user_id)
        return key is not None and self._rows.pop(key, None) is not None

    async def count(self, *, available: bool = True) -> int:
        return sum(1 for row in self._rows.values() if row.available == available)

    async def list(
        self,
        *,
        available: bool = True,
        skip: int = 0,
        take: int = 10,
    ) -> builtins.list[UserRecord]:
        rows = sorted(
            (row for row in self._rows.values() if row.available == available),
            key=lambda row: row.created_at,
        )
        return [row.model_copy() for row in rows[skip:skip + take]]
