from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from pathlib import Path
import sys
from typing import Any, Dict, Optional

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

SERVICE_ROOT = Path(__file__).resolve().parents[1]
if str(SERVICE_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICE_ROOT))

from matchmaking.main import app
from matchmaking.config import get_settings
from matchmaking.db import close_mongo_connection, connect_to_mongo, get_db
from matchmaking.db.collections import PROFILES_COLLECTION, USERS_COLLECTION
from matchmaking.models.user import UserDocument
from matchmaking.repositories.user import format_member_id
from matchmaking.services.account_service import get_account_service

UserFactory = Callable[..., Awaitable[UserDocument]]
ProfileFactory = Callable[..., Awaitable[Dict[str, Any]]]


@pytest.fixture(autouse=True)
def _env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017/test")
    monkeypatch.setenv("MONGO_DB_NAME", "matchmaking-test")
    monkeypatch.setenv("JWT_SECRET", "test-secret-with-at-least-32-bytes!!")
    monkeypatch.setenv("ADMIN_TOKEN", "admin-secret")
    monkeypatch.setenv("AUTH_RATE_LIMIT_MAX", "1000")
    monkeypatch.setattr("matchmaking.services.account_service._rate_limiter", None)
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest_asyncio.fixture
async def mongo_client(monkeypatch: pytest.MonkeyPatch) -> AsyncIterator[AsyncMongoMockClient]:
    client = AsyncMongoMockClient()

    def _client_factory(*_args, **_kwargs) -> AsyncMongoMockClient:
        return client

    monkeypatch.setattr("matchmaking.db.AsyncIOMotorClient", _client_factory)
    yield client
    client.close()


@pytest_asyncio.fixture
async def mongo_db(mongo_client: AsyncMongoMockClient):
    await connect_to_mongo()
    yield get_db()
    await close_mongo_connection()


@pytest_asyncio.fixture
async def api_client(mongo_db) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(mongo_db) -> UserFactory:
    counter = {"n": 0}

    async def _make(
        *,
        email: Optional[str] = None,
        status: str = "active",
        role: str = "male",
        member_id: Optional[str] = None,
    ) -> UserDocument:
        counter["n"] += 1
        n = counter["n"]
        doc = {
            "_id": ObjectId(),
            "email": email or f"user{n}@example.com",
            "passwordHash": "not-a-real-hash",
            "memberId": member_id or format_member_id(900000 + n),
            "role": role,
            "status": status,
            "membershipPlanId": "basic",
            "createdAt": n,
            "updatedAt": n,
        }
        await mongo_db[USERS_COLLECTION].insert_one(doc)
        return UserDocument(**doc)

    return _make


@pytest_asyncio.fixture
async def make_profile(mongo_db) -> ProfileFactory:
    counter = {"n": 0}

    async def _make(user: UserDocument, **fields: Any) -> Dict[str, Any]:
        counter["n"] += 1
        doc: Dict[str, Any] = {
            "_id": ObjectId(),
            "user": user.id,
            "firstName": f"Person{counter['n']}",
            "gender": "female",
            "dateOfBirth": datetime(1995, 6, 15),
            "city": "Riyadh",
            "nationality": "Saudi",
            "maritalStatus": "عزباء",
            "createdAt": 1_000 + counter["n"],
            "updatedAt": 1_000 + counter["n"],
        }
        doc.update(fields)
        await mongo_db[PROFILES_COLLECTION].insert_one(doc)
        return doc

    return _make


@pytest.fixture
def auth_headers(mongo_db) -> Callable[[UserDocument], Dict[str, str]]:
    def _headers(user: UserDocument) -> Dict[str, str]:
        token = get_account_service().issue_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers
