"""
Credential and account-lifecycle core.

- Identity: password hashing, token issuance, account lifecycle, directory queries
- Repository: persistence port for user rows and its adapters
- Errors: the fixed failure vocabulary returned to callers
"""

from userauth.kernel.errors import (
    AuthorityError,
    Conflict,
    NotFound,
    InvalidCredentials,
    InvalidToken,
    TokenSuperseded,
    Unauthorized,
    NoOp,
)

__all__ = [
    "AuthorityError",
    "Conflict",
    "NotFound",
    "InvalidCredentials",
    "InvalidToken",
    "TokenSuperseded",
    "Unauthorized",
    "NoOp",
]
