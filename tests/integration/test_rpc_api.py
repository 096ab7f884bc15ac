"""Integration tests for the HTTP binding of the RPC gateway."""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from userauth.config import Settings
from userauth.kernel.repository import InMemoryUserRepository
from userauth.main import build_gateway, create_app
from userauth.services.email import Notifier

RPC = "/api/v1/rpc"


@pytest_asyncio.fixture
async def client(email_backend):
    """HTTP client over the app with an in-memory store (lifespan not run)."""
    settings = Settings(secret_key="test-secret-key-for-testing-only", frontend_url="https://app.example.com")
    app = create_app(settings)
    app.state.gateway = build_gateway(
        settings,
        InMemoryUserRepository(),
        Notifier(email_backend, frontend_url=settings.frontend_url),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _register(client: AsyncClient, email: str = "a@x.com", password: str = "pw1"):
    return await client.post(
        f"{RPC}/auth.register.user",
        json={"email": email, "name": "Alice", "password": password},
    )


class TestRpcApi:
    """Tests for /api/v1/rpc."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_list_patterns(self, client):
        response = await client.get(RPC)

        assert "auth.login.user" in response.json()["patterns"]

    async def test_register(self, client):
        response = await _register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "a@x.com"
        assert "password_hash" not in data["user"]

    async def test_register_duplicate(self, client):
        await _register(client)

        response = await _register(client)

        assert response.status_code == 409
        assert response.json() == {"status_code": 409, "message": "User already exists"}

    async def test_login_rejected(self, client):
        await _register(client)

        response = await client.post(f"{RPC}/auth.login.user", json={"email": "a@x.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"status_code": 401, "message": "Invalid credentials"}

    async def test_confirm_then_login(self, client, email_backend):
        await _register(client)

        confirmed = await client.post(
            f"{RPC}/auth.confirm.account", json={"token": email_backend.last_token()}
        )
        login = await client.post(f"{RPC}/auth.login.user", json={"email": "a@x.com", "password": "pw1"})

        assert confirmed.json() == {"message": "Account confirmed successfully"}
        assert login.status_code == 200
        assert login.json()["user"]["verified"] is True

    async def test_unknown_pattern(self, client):
        response = await client.post(f"{RPC}/auth.unknown", json={})

        assert response.status_code == 404
        assert response.json()["message"] == "Unknown operation"

    async def test_invalid_payload(self, client):
        response = await client.post(f"{RPC}/auth.login.user", json={"email": "a@x.com"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"

    async def test_non_object_body(self, client):
        response = await client.post(f"{RPC}/auth.login.user", json=["a", "b"])

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_request_id_is_generated(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "x" * 500})

        assert response.headers["X-Request-ID"] != "x" * 500
        assert len(response.headers["X-Request-ID"]) == 36
