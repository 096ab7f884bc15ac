"""
SQLAlchemy 2.0 async implementation of the user repository.

Every method opens its own session and commits a single statement, so each
write is atomic per row and concurrent registrations are settled by the
unique index on ``users.email``.
"""

import builtins
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userauth.kernel.models.base import utcnow
from userauth.kernel.models.user import User
from userauth.kernel.repository.ports import (
    DuplicateEmailError,
    UserId,
    UserRecord,
    coerce_user_id,
)
from userauth.logging_config import get_logger

logger = get_logger(__name__)


class SqlAlchemyUserRepository:
    """``UserRepository`` backed by the ``users`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            return UserRecord.model_validate(user) if user else None

    async def find_by_id(self, user_id: UserId) -> Optional[UserRecord]:
        key = coerce_user_id(user_id)
        if key is None:
            return None
        async with self._session_factory() as session:
            user = await session.get(User, key)
            return UserRecord.model_validate(user) if user else None

    async def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: str,
        verified: bool = False,
    ) -> UserRecord:
        async with self._session_factory() as session:
            user = User(
                email=email,
                name=name,
                password_hash=password_hash,
                role=role,
                verified=verified,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.info("Insert rejected by unique constraint", extra={"error": str(e.orig)})
                raise DuplicateEmailError(email) from e
            return UserRecord.model_validate(user)

    async def update(self, user_id: UserId, **changes: Any) -> Optional[UserRecord]:
        key = coerce_user_id(user_id)
        if key is None:
            return None
        stmt = (
            update(User)
            .where(User.id == key)
            .values(**changes, updated_at=utcnow())
            .returning(User)
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
                user = result.scalar_one_or_none()
                record = UserRecord.model_validate(user) if user else None
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateEmailError(changes.get("email", "")) from e
            return record

    async def retire(self, user_id: UserId) -> bool:
        return await self.update(user_id, available=False, deleted_at=utcnow()) is not None

    async def purge(self, user_id: UserId) -> bool:
        key = coerce_user_id(user_id)
        if key is None:
            return False
        async with self._session_factory() as session:
            result = await session.execute(delete(User).where(User.id == key))
            await session.commit()
            return result.rowcount > 0

    async def count(self, *, available: bool = True) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(User).where(User.available == available)
            )
            return result.scalar_one()

    async def list(
        self,
        *,
        available: bool = True,
        skip: int = 0,
        take: int = 10,
    ) -> builtins.list[UserRecord]:
        query = (
            select(User)
            .where(User.available == available)
            .order_by(User.created_at, User.id)
            .offset(skip)
            .limit(take)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [UserRecord.model_validate(user) for user in result.scalars().all()]
