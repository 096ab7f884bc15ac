"""
Failure vocabulary for account and credential operations.

Every externally visible failure carries a fixed ``status_code`` and
``message``. Causes that must stay indistinguishable to callers (wrong
email vs. wrong password, expired vs. tampered token) share one message.
"""

from typing import Any, Optional


class AuthorityError(Exception):
    """Base class for failures surfaced to callers."""

    status_code: int = 400
    message: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"status_code": self.status_code, "message": self.message}


class Conflict(AuthorityError):
    """Duplicate email or already-verified account."""

    status_code = 409
    message = "User already exists"


class NotFound(AuthorityError):
    status_code = 404
    message = "User not found"


class InvalidCredentials(AuthorityError):
    status_code = 401
    message = "Invalid credentials"


class InvalidToken(AuthorityError):
    """Bad signature, expired, malformed or wrong-purpose token."""

    status_code = 400
    message = "Invalid or expired token"


class TokenSuperseded(AuthorityError):
    """Reset token was issued before the latest password change."""

    status_code = 400
    message = "Token is no longer valid (password was already changed)"


class Unauthorized(AuthorityError):
    """Session token could not be verified."""

    status_code = 401
    message = "Invalid token"


class NoOp(AuthorityError):
    status_code = 400
    message = "New password must be different"
