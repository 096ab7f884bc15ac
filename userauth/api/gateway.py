"""
Transport-agnostic RPC gateway.

Maps a message pattern plus a plain payload onto one account or directory
operation and returns a plain reply. Any transport (HTTP, a message bus, a
test) can sit in front of it.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from pydantic import BaseModel, ValidationError

from userauth.kernel.errors import AuthorityError
from userauth.kernel.identity.account_service import AccountService
from userauth.kernel.identity.directory import DirectoryQuery
from userauth.logging_config import get_logger
from userauth.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    PaginationRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
    UpdateUserRequest,
    UserIdRequest,
)
from userauth.schemas.common import ErrorResponse

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[BaseModel]]


@dataclass(frozen=True)
class Route:
    request_model: type[BaseModel]
    handler: Handler
    status_code: int = 200


@dataclass
class RpcReply:
    """Status code and JSON-ready body of one dispatched call."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class RpcGateway:
    """Dispatch table from message pattern to operation."""

    def __init__(self, accounts: AccountService, directory: DirectoryQuery):
        self.accounts = accounts
        self.directory = directory
        self._routes: dict[str, Route] = {
            "auth.register.user": Route(
                RegisterRequest,
                lambda p: accounts.register(p.email, p.name, p.password, p.role),
                status_code=201,
            ),
            "auth.confirm.account": Route(
                TokenRequest, lambda p: accounts.confirm_account(p.token)
            ),
            "auth.login.user": Route(
                LoginRequest, lambda p: accounts.login(p.email, p.password)
            ),
            "auth.verify.token": Route(
                TokenRequest, lambda p: accounts.verify_token(p.token)
            ),
            "auth.get.user": Route(
                UserIdRequest, lambda p: directory.get_user(p.id)
            ),
            "auth.list.users": Route(
                PaginationRequest, lambda p: directory.list_users(p.page, p.limit)
            ),
            "auth.update.user": Route(
                UpdateUserRequest,
                lambda p: accounts.update_user(p.id, email=p.email, name=p.name, password=p.password),
            ),
            "auth.change.password": Route(
                ChangePasswordRequest,
                lambda p: accounts.change_password(p.user_id, p.old_password, p.new_password),
            ),
            "auth.forgot.password": Route(
                ForgotPasswordRequest, lambda p: accounts.forgot_password(p.email)
            ),
            "auth.reset.password": Route(
                ResetPasswordRequest,
                lambda p: accounts.reset_password(p.token, p.new_password),
            ),
            "auth.retire.user": Route(
                UserIdRequest, lambda p: accounts.retire_user(p.id)
            ),
            "auth.delete.user": Route(
                UserIdRequest, lambda p: accounts.delete_user(p.id)
            ),
        }

    @property
    def patterns(self) -> list[str]:
        return sorted(self._routes)

    async def dispatch(
        self,
        pattern: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> RpcReply:
        """
        Run the operation registered for ``pattern``.

        Known failures become ``{status_code, message}`` replies. Anything
        else propagates to the transport.
        """
        route = self._routes.get(pattern)
        if route is None:
            return _error_reply(404, "Unknown operation")

        try:
            request = route.request_model.model_validate(payload or {})
        except ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(loc) for loc in err["loc"]),
                    "message": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            return _error_reply(400, "Validation error", errors=errors)

        try:
            result = await route.handler(request)
        except AuthorityError as e:
            logger.info("%s failed: %s", pattern, e.message)
            return RpcReply(status_code=e.status_code, body=e.to_dict())

        return RpcReply(status_code=route.status_code, body=result.model_dump(mode="json"))


def _error_reply(status_code: int, message: str, errors: Optional[list] = None) -> RpcReply:
    body = ErrorResponse(status_code=status_code, message=message, errors=errors)
    return RpcReply(status_code=status_code, body=body.model_dump(exclude_none=True))
