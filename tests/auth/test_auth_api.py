"""Registration and sign-in endpoints."""

import pytest
from conftest import DEFAULT_PASSWORD
from sqlalchemy import delete

from aceapt.db.models import User


def _registration(**overrides):
    body = {
        "username": "alice",
        "email": "alice@example.com",
        "password": DEFAULT_PASSWORD,
        "fullName": "Alice Example",
    }
    body.update(overrides)
    return body


class TestRegister:
    async def test_register_success(self, client):
        response = await client.post("/api/auth/register", json=_registration())
        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully"}

    async def test_new_user_starts_with_zero_coins(self, client):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.json()["user"]["coins"] == 0

    async def test_duplicate_username(self, client):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post("/api/auth/register", json=_registration(email="other@example.com"))
        assert response.status_code == 409
        assert response.json() == {"error": "Username or email already exists"}

    async def test_duplicate_email_case_insensitive(self, client):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post(
            "/api/auth/register", json=_registration(username="alice2", email="ALICE@example.com")
        )
        assert response.status_code == 409

    async def test_weak_password(self, client):
        response = await client.post("/api/auth/register", json=_registration(password="short"))
        assert response.status_code == 400
        assert "at least" in response.json()["error"]

    async def test_password_without_digit(self, client):
        response = await client.post("/api/auth/register", json=_registration(password="onlyletters"))
        assert response.status_code == 400
        assert "digit" in response.json()["error"]

    @pytest.mark.parametrize("missing", ["username", "email", "password"])
    async def test_missing_field(self, client, missing):
        body = _registration()
        del body[missing]
        response = await client.post("/api/auth/register", json=body)
        assert response.status_code == 400
        assert missing in response.json()["error"]

    async def test_invalid_email(self, client):
        response = await client.post("/api/auth/register", json=_registration(email="not-an-email"))
        assert response.status_code == 400

    async def test_invalid_username_characters(self, client):
        response = await client.post("/api/auth/register", json=_registration(username="bad name!"))
        assert response.status_code == 400

    async def test_full_name_optional(self, client):
        body = _registration()
        del body["fullName"]
        response = await client.post("/api/auth/register", json=body)
        assert response.status_code == 201


class TestLogin:
    async def test_login_returns_token_and_user(self, client):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accessToken"]
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] > 0
        assert data["user"]["username"] == "alice"
        assert data["user"]["email"] == "alice@example.com"
        assert data["user"]["full_name"] == "Alice Example"
        assert "password_hash" not in data["user"]

    async def test_login_email_case_insensitive(self, client):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post(
            "/api/auth/login", json={"email": "Alice@Example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 200

    async def test_wrong_password(self, client, fake_redis):
        await client.post("/api/auth/register", json=_registration())
        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "WrongPass9"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}
        fake_redis.incr.assert_awaited_once()

    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    async def test_successful_login_clears_failures(self, client, fake_redis):
        await client.post("/api/auth/register", json=_registration())
        await client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        fake_redis.delete.assert_awaited_once()

    async def test_locked_account(self, client, fake_redis):
        await client.post("/api/auth/register", json=_registration())
        fake_redis.get.return_value = "10"
        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 429
        assert "locked" in response.json()["error"]

    async def test_missing_password(self, client):
        response = await client.post("/api/auth/login", json={"email": "alice@example.com"})
        assert response.status_code == 400


class TestSessionRequired:
    async def test_no_token(self, client):
        response = await client.get("/api/user/profile")
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    async def test_garbage_token(self, client):
        response = await client.get("/api/user/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    async def test_token_for_deleted_user(self, client, user, db_session):
        await db_session.execute(delete(User).where(User.id == user["user_id"]))
        await db_session.commit()
        response = await client.get("/api/user/profile", headers=user["headers"])
        assert response.status_code == 401
