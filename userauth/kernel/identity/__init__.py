"""
Identity Core - credentials, tokens and account lifecycle.
"""

from userauth.kernel.identity.password import PasswordHasher
from userauth.kernel.identity.jwt import (
    TokenIssuer,
    TokenPurpose,
    VerifiedToken,
)
from userauth.kernel.identity.directory import DirectoryQuery
from userauth.kernel.identity.account_service import AccountService

__all__ = [
    "PasswordHasher",
    "TokenIssuer",
    "TokenPurpose",
    "VerifiedToken",
    "DirectoryQuery",
    "AccountService",
]
