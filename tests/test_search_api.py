from __future__ import annotations

from datetime import date, datetime

import pytest

from matchmaking.search.age import years_before


def _born_years_ago(years: int) -> datetime:
    # Mid-year offset keeps the computed age stable whatever today is.
    day = years_before(date.today(), years)
    return datetime(day.year, 1, 1) if day.month > 6 else datetime(day.year - 1, 7, 1)


@pytest.mark.asyncio
async def test_search_endpoint_returns_opposite_gender(api_client, make_user, make_profile, auth_headers) -> None:
    caller = await make_user(role="male")
    await make_profile(caller, gender="male", maritalStatus="أعزب")
    match = await make_user(member_id="MAW-000042")
    await make_profile(match, firstName="Layla", dateOfBirth=_born_years_ago(28), photoUrl="https://img/1.jpg")

    response = await api_client.get(
        "/api/search",
        params={"minAge": 25, "maxAge": 35, "city": "all", "hasPhoto": "true"},
        headers=auth_headers(caller),
    )

    assert response.status_code == 200, response.text
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["meta"] == {"current_page": 1, "last_page": 1, "per_page": 20, "total": 1}
    assert payload["filters_received"]["minAge"] == 25
    assert payload["filters_received"]["hasPhoto"] is True

    item = payload["data"][0]
    assert item["user"]["memberId"] == "MAW-000042"
    assert "passwordHash" not in item["user"]
    assert item["profile"]["firstName"] == "Layla"
    assert item["profile"]["gender"] == "female"
    assert item["profile"]["maritalStatus"] == "عزباء"
    assert 27 <= item["profile"]["age"] <= 29


@pytest.mark.asyncio
async def test_search_requires_auth(api_client) -> None:
    response = await api_client.get("/api/search", params={"minAge": 20})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_search_requires_age_bound(api_client, make_user, make_profile, auth_headers) -> None:
    caller = await make_user()
    await make_profile(caller, gender="male", maritalStatus="أعزب")

    response = await api_client.get("/api/search", headers=auth_headers(caller))

    assert response.status_code == 400
    assert "minAge" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"minAge": 40, "maxAge": 30},
        {"minAge": 10},
        {"maxAge": 81},
        {"minAge": "abc"},
        {"minAge": 20, "per_page": 0},
    ],
)
async def test_search_rejects_bad_filters(api_client, make_user, make_profile, auth_headers, params) -> None:
    caller = await make_user()
    await make_profile(caller, gender="male", maritalStatus="أعزب")

    response = await api_client.get("/api/search", params=params, headers=auth_headers(caller))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_without_profile(api_client, make_user, auth_headers) -> None:
    caller = await make_user()

    response = await api_client.get("/api/search", params={"minAge": 20}, headers=auth_headers(caller))

    assert response.status_code == 400
    assert "complete your profile" in response.json()["detail"]


@pytest.mark.asyncio
async def test_search_rejects_wrong_gender_override(api_client, make_user, make_profile, auth_headers) -> None:
    caller = await make_user()
    await make_profile(caller, gender="female")

    response = await api_client.get(
        "/api/search",
        params={"minAge": 20, "gender": "female"},
        headers=auth_headers(caller),
    )

    assert response.status_code == 400
    assert "male" in response.json()["detail"]


@pytest.mark.asyncio
async def test_search_store_failure(api_client, make_user, make_profile, auth_headers, monkeypatch) -> None:
    from pymongo.errors import OperationFailure

    from matchmaking.repositories.profile import ProfileRepository

    caller = await make_user()
    await make_profile(caller, gender="male", maritalStatus="أعزب")

    async def _boom(self, *_args, **_kwargs):
        raise OperationFailure("disk full on shard-3")

    monkeypatch.setattr(ProfileRepository, "find", _boom)

    response = await api_client.get("/api/search", params={"minAge": 20}, headers=auth_headers(caller))

    assert response.status_code == 500
    assert response.json()["detail"] == "search failed, please try again"
