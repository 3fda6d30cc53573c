from __future__ import annotations

from datetime import datetime

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from matchmaking.db import get_db
from matchmaking.db.collections import (
    FAVORITES_COLLECTION,
    PREFERENCES_COLLECTION,
    PROFILES_COLLECTION,
    USERS_COLLECTION,
)

ADMIN = {"X-Admin-Token": "admin-secret"}


@pytest.mark.asyncio
async def test_admin_routes_require_token(api_client) -> None:
    assert (await api_client.post("/api/admin/ensure-indexes")).status_code == 401
    assert (
        await api_client.post("/api/admin/ensure-indexes", headers={"X-Admin-Token": "wrong"})
    ).status_code == 401
    assert (await api_client.post("/api/admin/ensure-indexes", headers=ADMIN)).status_code == 200
    assert (
        await api_client.post("/api/admin/ensure-indexes", params={"token": "admin-secret"})
    ).status_code == 200


@pytest.mark.asyncio
async def test_ensure_indexes_creates_unique_indexes(api_client) -> None:
    response = await api_client.post("/api/admin/ensure-indexes", headers=ADMIN)
    assert response.json() == {"ok": True}

    users = get_db()[USERS_COLLECTION]
    await users.insert_one({"email": "a@example.com", "memberId": "MAW-000001"})
    with pytest.raises(DuplicateKeyError):
        await users.insert_one({"email": "a@example.com", "memberId": "MAW-000002"})
    with pytest.raises(DuplicateKeyError):
        await users.insert_one({"email": "b@example.com", "memberId": "MAW-000001"})

    profiles = get_db()[PROFILES_COLLECTION]
    owner = ObjectId()
    await profiles.insert_one({"user": owner})
    with pytest.raises(DuplicateKeyError):
        await profiles.insert_one({"user": owner})

    preferences = get_db()[PREFERENCES_COLLECTION]
    await preferences.insert_one({"user": owner})
    with pytest.raises(DuplicateKeyError):
        await preferences.insert_one({"user": owner})

    favorites = get_db()[FAVORITES_COLLECTION]
    target = ObjectId()
    await favorites.insert_one({"user": owner, "target": target})
    await favorites.insert_one({"user": owner, "target": ObjectId()})
    with pytest.raises(DuplicateKeyError):
        await favorites.insert_one({"user": owner, "target": target})


@pytest.mark.asyncio
async def test_normalize_profiles(api_client, make_user, make_profile) -> None:
    rows = {}
    for name, gender, dob in [
        ("canonical", "female", datetime(1990, 1, 1)),
        ("arabic", "ذكر", datetime(1990, 1, 1)),
        ("typo", "Malq", "1991-05-04"),
        ("garbage", "?", "not a date"),
    ]:
        user = await make_user()
        rows[name] = await make_profile(user, gender=gender, dateOfBirth=dob)

    dry = await api_client.post("/api/admin/profiles/normalize", params={"dryRun": "true"}, headers=ADMIN)
    assert dry.status_code == 200, dry.text
    assert dry.json()["dry_run"] is True
    assert dry.json()["gender_updated"] == 2
    untouched = await get_db()[PROFILES_COLLECTION].find_one({"_id": rows["arabic"]["_id"]})
    assert untouched["gender"] == "ذكر"

    report = (await api_client.post("/api/admin/profiles/normalize", headers=ADMIN)).json()
    assert report == {
        "scanned": 4,
        "gender_updated": 2,
        "gender_cleared": 1,
        "dob_updated": 1,
        "dob_cleared": 1,
        "timestamps_updated": 0,
        "unchanged": 1,
        "dry_run": False,
    }

    collection = get_db()[PROFILES_COLLECTION]
    assert (await collection.find_one({"_id": rows["arabic"]["_id"]}))["gender"] == "male"
    typo = await collection.find_one({"_id": rows["typo"]["_id"]})
    assert typo["gender"] == "male"
    assert typo["dateOfBirth"] == datetime(1991, 5, 4)
    garbage = await collection.find_one({"_id": rows["garbage"]["_id"]})
    assert garbage["gender"] is None
    assert garbage["dateOfBirth"] is None

    again = (await api_client.post("/api/admin/profiles/normalize", headers=ADMIN)).json()
    assert again["unchanged"] == 4


@pytest.mark.asyncio
async def test_set_status_unknown_user(api_client) -> None:
    response = await api_client.patch(
        "/api/admin/users/64b000000000000000000000/status",
        json={"status": "active"},
        headers=ADMIN,
    )
    assert response.status_code == 404

    bad = await api_client.patch(
        "/api/admin/users/64b000000000000000000000/status",
        json={"status": "deleted"},
        headers=ADMIN,
    )
    assert bad.status_code == 422
