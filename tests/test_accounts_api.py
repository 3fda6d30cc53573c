from __future__ import annotations

import pytest

from matchmaking.db import get_db
from matchmaking.repositories.user import UserRepository


async def _register(api_client, email: str, password: str = "s3cret-pass", role: str = "male"):
    return await api_client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "role": role},
    )


@pytest.mark.asyncio
async def test_register_login_and_me(api_client) -> None:
    response = await _register(api_client, "Nora@Example.com", role="female")
    assert response.status_code == 201, response.text
    payload = response.json()
    assert payload["token"]
    user = payload["user"]
    assert user["email"] == "nora@example.com"
    assert user["memberId"] == "MAW-000001"
    assert user["status"] == "pending"
    assert user["role"] == "female"
    assert "passwordHash" not in user

    second = await _register(api_client, "sami@example.com")
    assert second.json()["user"]["memberId"] == "MAW-000002"

    login = await api_client.post(
        "/api/auth/login",
        json={"email": "nora@example.com", "password": "s3cret-pass"},
    )
    assert login.status_code == 200, login.text
    token = login.json()["token"]

    me = await api_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "nora@example.com"

    stored = await UserRepository(get_db()).get_by_email("nora@example.com")
    assert stored is not None
    assert stored.password_hash != "s3cret-pass"


@pytest.mark.asyncio
async def test_duplicate_registration(api_client) -> None:
    assert (await _register(api_client, "dup@example.com")).status_code == 201
    response = await _register(api_client, "DUP@example.com")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_validation(api_client) -> None:
    assert (await _register(api_client, "not-an-email")).status_code == 422
    assert (await _register(api_client, "short@example.com", password="123")).status_code == 422


@pytest.mark.asyncio
async def test_login_failures(api_client) -> None:
    await _register(api_client, "lina@example.com")

    wrong = await api_client.post(
        "/api/auth/login",
        json={"email": "lina@example.com", "password": "wrong-password"},
    )
    assert wrong.status_code == 401

    missing = await api_client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "whatever-pass"},
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_suspended_account_cannot_login(api_client) -> None:
    created = await _register(api_client, "held@example.com")
    user_id = created.json()["user"]["id"]

    patch = await api_client.patch(
        f"/api/admin/users/{user_id}/status",
        json={"status": "suspended"},
        headers={"X-Admin-Token": "admin-secret"},
    )
    assert patch.status_code == 200, patch.text
    assert patch.json()["status"] == "suspended"

    login = await api_client.post(
        "/api/auth/login",
        json={"email": "held@example.com", "password": "s3cret-pass"},
    )
    assert login.status_code == 401
    assert login.json()["detail"] == "account suspended"


@pytest.mark.asyncio
async def test_invalid_token_rejected(api_client) -> None:
    response = await api_client.get("/api/users/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401

    response = await api_client.get("/api/users/me", headers={"Authorization": "Token abc"})
    assert response.status_code == 401
