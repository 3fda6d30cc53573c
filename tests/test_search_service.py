from __future__ import annotations

from datetime import date, datetime

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from matchmaking.models.search import SearchFilters
from matchmaking.repositories.profile import ProfileRepository
from matchmaking.repositories.user import UserRepository
from matchmaking.search.errors import (
    ProfileIncompleteError,
    SearchFailedError,
    SearchValidationError,
)
from matchmaking.services.search_service import SearchService, last_page_for

AS_OF = date(2024, 6, 15)


def _service(db) -> SearchService:
    return SearchService(ProfileRepository(db), UserRepository(db), default_per_page=20, max_per_page=100)


def _filters(**params) -> SearchFilters:
    return SearchFilters.model_validate({"minAge": 18, "maxAge": 80, **params})


async def _male_caller(make_user, make_profile, **profile_fields):
    caller = await make_user(role="male")
    fields = {"gender": "male", "maritalStatus": "أعزب", **profile_fields}
    await make_profile(caller, **fields)
    return caller


@pytest.mark.asyncio
async def test_male_caller_sees_only_active_female_profiles(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)

    alice = await make_user()
    await make_profile(alice, gender="Female", firstName="Alice")
    huda = await make_user()
    await make_profile(huda, gender="أنثى", firstName="Huda")
    omar = await make_user()
    await make_profile(omar, gender="male", maritalStatus="أعزب", firstName="Omar")
    unknown = await make_user()
    await make_profile(unknown, gender="other", firstName="Unknown")
    suspended = await make_user(status="suspended")
    await make_profile(suspended, gender="female", firstName="Suspended")
    pending = await make_user(status="pending")
    await make_profile(pending, gender="female", firstName="Pending")

    response = await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)

    names = sorted(item.profile.first_name for item in response.data)
    assert names == ["Alice", "Huda"]
    assert {item.profile.gender for item in response.data} == {"female"}
    assert response.meta.total == 2
    assert response.meta.last_page == 1
    assert response.status == "success"
    for item in response.data:
        assert item.profile.age == 29
        assert item.user.status == "active"
        assert not hasattr(item.user, "password_hash")


@pytest.mark.asyncio
async def test_female_caller_with_arabic_gender_sees_males(mongo_db, make_user, make_profile) -> None:
    caller = await make_user(role="female")
    await make_profile(caller, gender="أنثى")
    omar = await make_user()
    await make_profile(omar, gender="ذكر", maritalStatus="مطلق", firstName="Omar")
    sara = await make_user()
    await make_profile(sara, gender="female", firstName="Sara")

    response = await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)

    assert [item.profile.first_name for item in response.data] == ["Omar"]
    assert response.data[0].profile.gender == "male"
    assert response.data[0].profile.marital_status == "مطلق"


@pytest.mark.asyncio
async def test_female_with_male_only_status_is_excluded(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    bad = await make_user()
    await make_profile(bad, gender="female", maritalStatus="أعزب", firstName="Bad")
    shared = await make_user()
    await make_profile(shared, gender="female", maritalStatus=" مطلق - مع أولاد ", firstName="Shared")

    response = await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)

    assert [item.profile.first_name for item in response.data] == ["Shared"]
    assert response.data[0].profile.marital_status == "مطلق - مع أولاد"


@pytest.mark.asyncio
async def test_age_bounds_filter_candidates(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    for name, dob in [
        ("TooYoung", datetime(2001, 6, 16)),
        ("JustTwentyThree", datetime(2001, 6, 15)),
        ("Thirty", datetime(1994, 1, 1)),
        ("TooOld", datetime(1993, 6, 15)),
    ]:
        user = await make_user()
        await make_profile(user, firstName=name, dateOfBirth=dob)
    missing = await make_user()
    await make_profile(missing, firstName="NoDob", dateOfBirth=None)

    response = await _service(mongo_db).search(
        str(caller.id), _filters(minAge=23, maxAge=30), as_of=AS_OF
    )

    assert sorted(item.profile.first_name for item in response.data) == ["JustTwentyThree", "Thirty"]
    assert {item.profile.age for item in response.data} == {23, 30}


@pytest.mark.asyncio
async def test_pagination_is_newest_first(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    for index in range(5):
        user = await make_user()
        await make_profile(user, firstName=f"F{index}", createdAt=10_000 + index)

    service = _service(mongo_db)
    first = await service.search(str(caller.id), _filters(per_page=2), as_of=AS_OF)
    last = await service.search(str(caller.id), _filters(per_page=2, page=3), as_of=AS_OF)
    beyond = await service.search(str(caller.id), _filters(per_page=2, page=4), as_of=AS_OF)

    assert [item.profile.first_name for item in first.data] == ["F4", "F3"]
    assert first.meta.model_dump() == {"current_page": 1, "last_page": 3, "per_page": 2, "total": 5}
    assert [item.profile.first_name for item in last.data] == ["F0"]
    assert beyond.data == []
    assert beyond.meta.total == 5


@pytest.mark.asyncio
async def test_empty_result_has_zero_last_page(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)

    response = await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)

    assert response.data == []
    assert response.meta.total == 0
    assert response.meta.last_page == 0


@pytest.mark.asyncio
async def test_member_id_lookup(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    target = await make_user(member_id="MAW-000777")
    await make_profile(target, firstName="Target")
    other = await make_user()
    await make_profile(other, firstName="Other")

    service = _service(mongo_db)
    found = await service.search(str(caller.id), _filters(memberId="MAW-000777"), as_of=AS_OF)
    missing = await service.search(str(caller.id), _filters(memberId="MAW-999999"), as_of=AS_OF)

    assert [item.profile.first_name for item in found.data] == ["Target"]
    assert found.data[0].user.member_id == "MAW-000777"
    assert missing.data == []
    assert missing.meta.total == 0


@pytest.mark.asyncio
async def test_invalid_marital_filter_is_ignored(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    for name in ("A", "B"):
        user = await make_user()
        await make_profile(user, firstName=name)

    response = await _service(mongo_db).search(
        str(caller.id), _filters(maritalStatus="متزوج"), as_of=AS_OF
    )

    assert response.meta.total == 2
    assert response.filters_received["maritalStatus"] == "متزوج"


@pytest.mark.asyncio
async def test_marital_filter_uses_target_spelling(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    single = await make_user()
    await make_profile(single, firstName="Single", maritalStatus="عزباء")
    widowed = await make_user()
    await make_profile(widowed, firstName="Widowed", maritalStatus="أرملة")

    response = await _service(mongo_db).search(
        str(caller.id), _filters(maritalStatus="أعزب"), as_of=AS_OF
    )

    assert [item.profile.first_name for item in response.data] == ["Single"]


@pytest.mark.asyncio
async def test_missing_caller_profile(mongo_db, make_user) -> None:
    caller = await make_user()
    with pytest.raises(ProfileIncompleteError, match="complete your profile"):
        await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)


@pytest.mark.asyncio
async def test_caller_profile_without_gender(mongo_db, make_user, make_profile) -> None:
    caller = await make_user()
    await make_profile(caller, gender="")
    with pytest.raises(ProfileIncompleteError, match="missing gender"):
        await _service(mongo_db).search(str(caller.id), _filters(), as_of=AS_OF)


@pytest.mark.asyncio
async def test_validation_errors_before_store_access() -> None:
    service = SearchService(_ExplodingProfiles(), _ExplodingUsers())
    caller = str(ObjectId())

    with pytest.raises(SearchValidationError):
        await service.search(caller, SearchFilters())
    with pytest.raises(SearchValidationError):
        await service.search("not-an-id", _filters())
    with pytest.raises(SearchValidationError):
        await service.search(caller, _filters(gender="robot"))


@pytest.mark.asyncio
async def test_explicit_gender_must_match_target(mongo_db, make_user, make_profile) -> None:
    caller = await _male_caller(make_user, make_profile)
    service = _service(mongo_db)

    with pytest.raises(SearchValidationError):
        await service.search(str(caller.id), _filters(gender="male"), as_of=AS_OF)
    response = await service.search(str(caller.id), _filters(gender="female"), as_of=AS_OF)
    assert response.meta.total == 0


@pytest.mark.asyncio
async def test_store_failure_is_opaque() -> None:
    service = SearchService(_ExplodingProfiles(), _ExplodingUsers())

    with pytest.raises(SearchFailedError) as excinfo:
        await service.search(str(ObjectId()), _filters())
    assert str(excinfo.value) == "search failed, please try again"
    assert "timeout" not in str(excinfo.value)


def test_last_page_for() -> None:
    assert last_page_for(0, 20) == 0
    assert last_page_for(1, 20) == 1
    assert last_page_for(40, 20) == 2
    assert last_page_for(41, 20) == 3


class _ExplodingProfiles:
    async def get_by_user_id(self, *_args, **_kwargs):
        raise ServerSelectionTimeoutError("timeout talking to primary")


class _ExplodingUsers:
    async def find_by_member_id(self, *_args, **_kwargs):
        raise ServerSelectionTimeoutError("timeout talking to primary")
