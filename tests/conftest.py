"""
Pytest fixtures for auth service tests.
"""

import re
from typing import Optional

import pytest
import pytest_asyncio

from userauth.api.gateway import RpcGateway
from userauth.kernel.identity import AccountService, DirectoryQuery, PasswordHasher, TokenIssuer
from userauth.kernel.repository import InMemoryUserRepository
from userauth.schemas.auth import RegistrationResponse
from userauth.services.email import EmailBackend, Notifier

TEST_SECRET = "test-secret-key-for-testing-only"

_TOKEN_RE = re.compile(r"token=([A-Za-z0-9_\-.]+)")


class RecordingEmailBackend(EmailBackend):
    """Keeps every message instead of sending it."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    async def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return not self.fail

    def last_token(self) -> str:
        """Token embedded in the link of the most recent message."""
        match = _TOKEN_RE.search(self.sent[-1]["text"])
        assert match, "no token link in last email"
        return match.group(1)


@pytest.fixture
def email_backend() -> RecordingEmailBackend:
    return RecordingEmailBackend()


@pytest.fixture
def notifier(email_backend: RecordingEmailBackend) -> Notifier:
    return Notifier(backend=email_backend, frontend_url="https://app.example.com")


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture
def issuer() -> TokenIssuer:
    """Token issuer with a fixed test secret."""
    return TokenIssuer(secret_key=TEST_SECRET)


@pytest.fixture
def accounts(repository, hasher, issuer, notifier) -> AccountService:
    return AccountService(
        repository=repository,
        hasher=hasher,
        issuer=issuer,
        notifier=notifier,
    )


@pytest.fixture
def directory(repository) -> DirectoryQuery:
    return DirectoryQuery(repository)


@pytest.fixture
def gateway(accounts, directory) -> RpcGateway:
    return RpcGateway(accounts=accounts, directory=directory)


@pytest_asyncio.fixture
async def registered(accounts: AccountService) -> RegistrationResponse:
    """A freshly registered, unverified account (a@x.com / pw1)."""
    return await accounts.register(email="a@x.com", name="Alice", password="pw1")
