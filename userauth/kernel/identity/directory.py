"""
Read-only directory lookups.
"""

import math

from userauth.kernel.errors import NotFound
from userauth.kernel.repository.ports import UserId, UserRepository
from userauth.schemas.auth import ListMeta, UserListItem, UserListResponse, UserSummary


class DirectoryQuery:
    """
    Projections of user rows for callers.

    Results never include the credential hash. Listings only show rows with
    ``available=True``; lookups by id also see retired rows.
    """

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def get_user(self, user_id: UserId) -> UserSummary:
        user = await self.repository.find_by_id(user_id)
        if user is None:
            raise NotFound()
        return UserSummary.model_validate(user)

    async def list_users(self, page: int = 1, limit: int = 10) -> UserListResponse:
        """
        One page of available users, oldest first.

        ``last_page`` is ``ceil(total / limit)``; a non-positive ``limit``
        returns no rows and ``last_page = 0`` instead of dividing by zero.
        """
        total = await self.repository.count(available=True)
        if limit <= 0:
            return UserListResponse(
                data=[],
                meta=ListMeta(total=total, page=page, last_page=0),
            )

        rows = await self.repository.list(
            available=True,
            skip=max(page - 1, 0) * limit,
            take=limit,
        )
        return UserListResponse(
            data=[UserListItem.model_validate(row) for row in rows],
            meta=ListMeta(total=total, page=page, last_page=math.ceil(total / limit)),
        )
