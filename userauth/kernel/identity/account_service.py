"""
Account lifecycle: registration, confirmation, login, password change and
password reset.
"""

import asyncio
from typing import Optional, Union

from pydantic import ValidationError

from userauth.kernel.errors import (
    Conflict,
    InvalidCredentials,
    InvalidToken,
    NoOp,
    NotFound,
    TokenSuperseded,
    Unauthorized,
)
from userauth.kernel.identity.jwt import TokenIssuer, TokenPurpose, VerifiedToken
from userauth.kernel.identity.password import PasswordHasher
from userauth.kernel.models.base import utcnow
from userauth.kernel.models.user import UserRole
from userauth.kernel.repository.ports import (
    DuplicateEmailError,
    UserId,
    UserRecord,
    UserRepository,
)
from userauth.logging_config import get_logger
from userauth.schemas.auth import (
    RegistrationResponse,
    SessionResponse,
    UserResponse,
    UserSummary,
)
from userauth.schemas.common import SuccessResponse
from userauth.services.email import Notifier

logger = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If this email is registered, a password reset link will be sent."
CONFIRMATION_EMAIL_WARNING = "Confirmation email could not be sent"


class AccountService:
    """
    Service for account state transitions.

    Each operation does at most one repository write. Failures are raised as
    ``AuthorityError`` subclasses carrying the caller-facing status and
    message.

    The credential epoch is ``password_changed_at``: every successful
    credential change moves it forward, and a reset token whose ``iat`` is
    not strictly later than the epoch is refused. No revocation list exists.
    """

    def __init__(
        self,
        repository: UserRepository,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        notifier: Notifier,
    ):
        self.repository = repository
        self.hasher = hasher
        self.issuer = issuer
        self.notifier = notifier
        self._dummy_hash: Optional[str] = None

    # Helpers

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU bound; keep it off the event loop
        return await asyncio.to_thread(self.hasher.hash, password)

    async def _verify(self, password: str, digest: str) -> bool:
        return await asyncio.to_thread(self.hasher.verify, password, digest)

    async def _unknown_user_digest(self) -> str:
        """Digest checked when no account matches, so timing stays uniform."""
        if self._dummy_hash is None:
            self._dummy_hash = await self._hash("not-a-real-password")
        return self._dummy_hash

    def _session(self, user: UserRecord) -> SessionResponse:
        sanitized = UserResponse.model_validate(user)
        token = self.issuer.issue_session_token(sanitized.model_dump(mode="json"))
        return SessionResponse(user=sanitized, token=token)

    def _verify_purpose(self, token: str, purpose: TokenPurpose) -> VerifiedToken:
        verified = self.issuer.verify(token)
        if verified is None or verified.purpose != purpose.value:
            raise InvalidToken()
        return verified

    async def _require_user(self, user_id: UserId) -> UserRecord:
        user = await self.repository.find_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    # Operations

    async def register(
        self,
        email: str,
        name: str,
        password: str,
        role: Union[UserRole, str] = UserRole.USER,
    ) -> RegistrationResponse:
        """
        Create an unverified account and email a confirmation link.

        The uniqueness check covers retired accounts too. A failed
        confirmation email does not undo the account; it is reported in
        ``warnings``.

        Raises:
            Conflict: If the email is already taken
        """
        if await self.repository.find_by_email(email) is not None:
            raise Conflict()

        password_hash = await self._hash(password)
        try:
            user = await self.repository.create(
                email=email,
                name=name,
                password_hash=password_hash,
                role=UserRole(role).value,
                verified=False,
            )
        except DuplicateEmailError:
            # Lost a race with a concurrent registration
            raise Conflict() from None

        logger.info("User registered", extra={"user_id": str(user.id)})

        confirmation = self.issuer.issue_purpose_token(user.id, TokenPurpose.CONFIRM_ACCOUNT)
        link = self.notifier.confirmation_link(confirmation)
        warnings: list[str] = []
        try:
            delivered = await self.notifier.send_confirmation_email(user.email, link)
        except Exception:
            # Row is already committed
            logger.exception("Confirmation email failed", extra={"user_id": str(user.id)})
            delivered = False
        if not delivered:
            logger.warning("Confirmation email not delivered", extra={"user_id": str(user.id)})
            warnings.append(CONFIRMATION_EMAIL_WARNING)

        session = self._session(user)
        return RegistrationResponse(user=session.user, token=session.token, warnings=warnings)

    async def confirm_account(self, token: str) -> SuccessResponse:
        """
        Mark an account verified using a confirmation token.

        Raises:
            InvalidToken: Bad, expired or wrong-purpose token
            NotFound: The account no longer exists
            Conflict: The account is already verified
        """
        verified = self._verify_purpose(token, TokenPurpose.CONFIRM_ACCOUNT)
        user = await self._require_user(verified.claims.get("user_id", ""))
        if user.verified:
            raise Conflict("Account already verified")

        if await self.repository.update(user.id, verified=True) is None:
            raise NotFound()
        logger.info("Account confirmed", extra={"user_id": str(user.id)})
        return SuccessResponse(message="Account confirmed successfully")

    async def login(self, email: str, password: str) -> SessionResponse:
        """
        Check credentials and open a session.

        Unknown email, retired account and wrong password all raise the same
        InvalidCredentials.
        """
        user = await self.repository.find_by_email(email)
        digest = user.password_hash if user else await self._unknown_user_digest()
        valid = await self._verify(password, digest)

        if user is None or not user.available or not valid:
            logger.info("Login rejected")
            raise InvalidCredentials()

        if self.hasher.needs_rehash(user.password_hash):
            # Cost upgrade only; the credential epoch stays where it is
            user = await self.repository.update(
                user.id, password_hash=await self._hash(password)
            ) or user
            logger.info("Password rehashed", extra={"user_id": str(user.id)})

        logger.info("User logged in", extra={"user_id": str(user.id)})
        return self._session(user)

    async def verify_token(self, token: str) -> SessionResponse:
        """
        Sliding refresh of a session token.

        The embedded claims are trusted as issued; the store is not read
        again, so a retired or changed account keeps refreshing until its
        last token expires.

        Raises:
            Unauthorized: The token fails verification or is a purpose token
        """
        verified = self.issuer.verify(token)
        if verified is None or verified.purpose is not None:
            raise Unauthorized()
        try:
            user = UserResponse.model_validate(verified.claims)
        except ValidationError:
            raise Unauthorized() from None

        return SessionResponse(
            user=user,
            token=self.issuer.issue_session_token(verified.claims),
        )

    async def change_password(
        self,
        user_id: UserId,
        old_password: str,
        new_password: str,
    ) -> SuccessResponse:
        """
        Replace a password after checking the current one.

        Moves the credential epoch forward, which voids every outstanding
        reset token for the account.

        Raises:
            NotFound: No such account
            InvalidCredentials: ``old_password`` is wrong
            NoOp: The new password equals the old one
        """
        user = await self._require_user(user_id)
        if not await self._verify(old_password, user.password_hash):
            raise InvalidCredentials()
        if old_password == new_password:
            raise NoOp()

        await self.repository.update(
            user.id,
            password_hash=await self._hash(new_password),
            password_changed_at=utcnow(),
        )
        logger.info("Password changed", extra={"user_id": str(user.id)})
        return SuccessResponse(message="Password changed successfully")

    async def forgot_password(self, email: str) -> SuccessResponse:
        """
        Start a password reset.

        The reply is the same whether or not the email belongs to an
        account. The reset email is sent in the background.
        """
        user = await self.repository.find_by_email(email)
        if user is not None and user.available:
            token = self.issuer.issue_purpose_token(user.id, TokenPurpose.RESET_PASSWORD)
            self.notifier.send_password_reset_email(user.email, self.notifier.reset_link(token))
            logger.info("Password reset requested", extra={"user_id": str(user.id)})
        return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)

    async def reset_password(self, token: str, new_password: str) -> SuccessResponse:
        """
        Set a new password using a reset token.

        Raises:
            InvalidToken: Bad, expired or wrong-purpose token
            NotFound: The account no longer exists or was retired
            TokenSuperseded: The password changed at or after the token's iat
        """
        verified = self._verify_purpose(token, TokenPurpose.RESET_PASSWORD)
        user = await self._require_user(verified.claims.get("user_id", ""))
        if not user.available:
            raise NotFound()

        changed_at = user.password_changed_at
        if changed_at is not None and changed_at >= verified.issued_at:
            logger.info("Superseded reset token", extra={"user_id": str(user.id)})
            raise TokenSuperseded()

        updated = await self.repository.update(
            user.id,
            password_hash=await self._hash(new_password),
            password_changed_at=utcnow(),
        )
        if updated is None:
            raise NotFound()
        logger.info("Password reset", extra={"user_id": str(user.id)})
        return SuccessResponse(message="Password reset successfully")

    async def update_user(
        self,
        user_id: UserId,
        email: Optional[str] = None,
        name: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserSummary:
        """
        Update profile fields.

        A new password counts as a credential change and advances the epoch.

        Raises:
            NotFound: No such account
            Conflict: The new email belongs to another account
        """
        user = await self._require_user(user_id)

        changes: dict = {}
        if email is not None and email != user.email:
            if await self.repository.find_by_email(email) is not None:
                raise Conflict()
            changes["email"] = email
        if name is not None:
            changes["name"] = name
        if password is not None:
            changes["password_hash"] = await self._hash(password)
            changes["password_changed_at"] = utcnow()

        if not changes:
            return UserSummary.model_validate(user)

        try:
            updated = await self.repository.update(user.id, **changes)
        except DuplicateEmailError:
            raise Conflict() from None
        if updated is None:
            raise NotFound()

        logger.info(
            "User updated",
            extra={"user_id": str(user.id), "fields": sorted(k for k in changes if k != "password_hash")},
        )
        return UserSummary.model_validate(updated)

    async def delete_user(self, user_id: UserId) -> SuccessResponse:
        """Physically remove an account."""
        if not await self.repository.purge(user_id):
            raise NotFound()
        logger.info("User deleted", extra={"user_id": str(user_id)})
        return SuccessResponse(message="User deleted successfully")

    async def retire_user(self, user_id: UserId) -> SuccessResponse:
        """Soft delete: hide the account from listings and block sign-in."""
        if not await self.repository.retire(user_id):
            raise NotFound()
        logger.info("User retired", extra={"user_id": str(user_id)})
        return SuccessResponse(message="User deactivated successfully")
