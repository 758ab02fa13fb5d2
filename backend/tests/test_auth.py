"""
unMute Backend: Auth Endpoint Tests
=====================================

What:  Registration, login, token contents and the three auth levels.
How:   Real app + temporary SQLite database through httpx.AsyncClient.

What we test:
    ✅ Registration stores a non-admin user, even if is_admin is sent
    ✅ Duplicate email / username → 409 and no extra row
    ✅ Login by email or username; token carries the stored id and admin flag
    ✅ Bad credentials → 400 "Invalid credentials"
    ✅ Missing / invalid token → 401, non-admin on admin route → 403
"""

import pytest
from jose import jwt
from sqlalchemy import func, select

from unmute.config import settings
from unmute.models.user import User
from unmute.security import decode_access_token


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_creates_user(self, test_client, db_session):
        response = await test_client.post(
            "/auth/register",
            json={"email": "New@Example.com", "username": "newbie", "password": "secret123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ok"
        assert body["data"]["email"] == "new@example.com"
        assert body["data"]["username"] == "newbie"
        assert body["data"]["is_admin"] is False

        user = await db_session.get(User, body["data"]["id"])
        assert user is not None
        # Stored as a bcrypt hash, never the plain password
        assert user.password != "secret123"
        assert user.password.startswith("$2")

    @pytest.mark.asyncio
    async def test_register_ignores_is_admin_in_body(self, test_client):
        response = await test_client.post(
            "/auth/register",
            json={"email": "sneaky@example.com", "password": "secret123", "is_admin": True},
        )
        assert response.status_code == 201
        assert response.json()["data"]["is_admin"] is False

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict_and_adds_no_row(self, test_client, db_session):
        first = await test_client.post(
            "/auth/register", json={"email": "dup@example.com", "password": "secret123"}
        )
        assert first.status_code == 201

        second = await test_client.post(
            "/auth/register", json={"email": "DUP@example.com", "password": "other-pass"}
        )
        assert second.status_code == 409
        assert second.json()["status"] == "error"
        assert second.json()["error"] == "Email already registered"

        count = await db_session.scalar(select(func.count(User.id)))
        assert count == 1

    @pytest.mark.asyncio
    async def test_duplicate_username_is_conflict(self, test_client, db_session):
        await test_client.post(
            "/auth/register",
            json={"email": "a@example.com", "username": "sam", "password": "secret123"},
        )
        response = await test_client.post(
            "/auth/register",
            json={"email": "b@example.com", "username": "sam", "password": "secret123"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Username already taken"
        assert await db_session.scalar(select(func.count(User.id))) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"password": "secret123"},
            {"email": "not-an-email", "password": "secret123"},
            {"email": "ok@example.com"},
            {"email": "ok@example.com", "password": "123"},
        ],
    )
    async def test_register_rejects_bad_input(self, test_client, body):
        response = await test_client.post("/auth/register", json=body)
        assert response.status_code == 400
        assert response.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_malformed_json_is_400_envelope(self, test_client):
        response = await test_client.post(
            "/auth/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert "request_id" in body


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_token_carries_id_and_admin_flag(self, test_client, make_user):
        account = await make_user("carol@example.com", username="carol")
        admin_account = await make_user("root@example.com", admin=True)

        claims = jwt.decode(
            account["token"], settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        assert claims["id"] == account["id"]
        assert claims["is_admin"] is False
        assert "exp" in claims

        principal = decode_access_token(admin_account["token"])
        assert principal.id == admin_account["id"]
        assert principal.is_admin is True

    @pytest.mark.asyncio
    async def test_login_by_username(self, test_client, make_user):
        account = await make_user("dave@example.com", username="dave")
        response = await test_client.post(
            "/auth/login", json={"identifier": "dave", "password": account["password"]}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == account["id"]
        assert data["email"] == "dave@example.com"
        assert data["token"]

    @pytest.mark.asyncio
    async def test_login_accepts_legacy_email_key_under_api_prefix(self, test_client, make_user):
        await make_user("erin@example.com")
        response = await test_client.post(
            "/api/auth/login", json={"email": "erin@example.com", "password": "secret123"}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, make_user):
        await make_user("frank@example.com")
        response = await test_client.post(
            "/auth/login", json={"identifier": "frank@example.com", "password": "wrong-pass"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.post(
            "/auth/login", json={"identifier": "ghost@example.com", "password": "secret123"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/auth/login", json={"identifier": "x"})
        assert response.status_code == 400


class TestAuthLevels:

    @pytest.mark.asyncio
    async def test_protected_route_without_token(self, test_client):
        response = await test_client.get("/journal")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_protected_route_with_garbage_token(self, test_client):
        response = await test_client.get(
            "/journal", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_route_with_regular_user(self, test_client, user):
        response = await test_client.get("/admin/users", headers=user["headers"])
        assert response.status_code == 403
        assert response.json()["error"] == "Admin access required"

    @pytest.mark.asyncio
    async def test_admin_route_without_token(self, test_client):
        response = await test_client.get("/admin/users")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_public_route_treats_bad_token_as_anonymous(self, test_client):
        response = await test_client.get(
            "/posts/public", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_responses_carry_request_id(self, test_client):
        response = await test_client.get("/posts/public", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"
