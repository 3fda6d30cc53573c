"""Candidate search: the caller's own profile decides whom they may see.

The pipeline runs in stages that hand plain values to each other:

1. load the caller profile and derive the target gender,
2. translate age bounds into a date-of-birth window,
3. build the store query (``search.filters``),
4. fetch one page of profiles and, concurrently, count every match owned by
   an active account,
5. join the page to active users and re-check each candidate in process.

Step 5 exists because stored gender and marital-status values are known to be
inconsistent; a row the query matched loosely is dropped rather than shown.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from ..config import get_settings
from ..db import get_db
from ..models.identifiers import parse_object_id
from ..models.profile import ProfileDocument
from ..models.search import (
    SearchFilters,
    SearchMeta,
    SearchResponse,
    SearchResult,
    SearchResultProfile,
)
from ..models.user import UserDocument, UserStatus, UserSummary
from ..repositories.exceptions import RepositoryError
from ..repositories.profile import ProfileRepository
from ..repositories.user import UserRepository
from ..search.age import DobRange, age_range_to_dob_range, compute_age
from ..search.errors import (
    ProfileIncompleteError,
    SearchFailedError,
    SearchValidationError,
)
from ..search.filters import CandidateFilter, build_candidate_filter, provided
from ..search.gender import Gender, normalize_gender, target_gender_for
from ..search.marital_status import is_valid_for, normalize_marital_status

LOGGER = logging.getLogger("uvicorn.error")


def candidate_rejection_reason(
    profile: ProfileDocument,
    target_gender: Gender,
    dob_range: Optional[DobRange] = None,
) -> Optional[str]:
    """Return why a fetched profile must not be shown, or None if it is fine.

    Marital status is checked against the profile's own gender, not the
    caller's target.
    """

    own_gender = normalize_gender(profile.gender)
    if own_gender is None:
        return "unrecognized gender"
    if own_gender != target_gender:
        return "gender mismatch"
    if not is_valid_for(profile.marital_status, own_gender):
        return "marital status invalid for own gender"
    if dob_range is not None and dob_range.is_bounded:
        if profile.date_of_birth is None or not dob_range.contains(profile.date_of_birth):
            return "date of birth outside requested ages"
    return None


def build_search_result(
    profile: ProfileDocument,
    user: UserDocument,
    *,
    as_of: Optional[date] = None,
) -> SearchResult:
    own_gender = normalize_gender(profile.gender) or ""
    marital_status = profile.marital_status
    if own_gender:
        marital_status = normalize_marital_status(profile.marital_status, own_gender)
    return SearchResult(
        user=UserSummary.from_document(user),
        profile=SearchResultProfile(
            id=profile.id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            gender=own_gender,
            age=compute_age(profile.date_of_birth, as_of=as_of),
            nationality=profile.nationality,
            city=profile.city,
            country_of_residence=profile.country_of_residence,
            education=profile.education,
            occupation=profile.occupation,
            marital_status=marital_status,
            marriage_type=profile.marriage_type,
            polygamy_acceptance=profile.polygamy_acceptance,
            compatibility_test=profile.compatibility_test,
            religion=profile.religion,
            religiosity_level=profile.religiosity_level,
            about=profile.about,
            photo_url=profile.photo_url,
            date_of_birth=profile.date_of_birth,
            height=profile.height,
        ),
    )


def last_page_for(total: int, per_page: int) -> int:
    return math.ceil(total / per_page) if per_page > 0 else 0


class SearchService:
    """Runs candidate searches against the profile and user stores."""

    def __init__(
        self,
        profile_repo: ProfileRepository,
        user_repo: UserRepository,
        *,
        default_per_page: int = 20,
        max_per_page: int = 100,
    ) -> None:
        self._profiles = profile_repo
        self._users = user_repo
        self._default_per_page = default_per_page
        self._max_per_page = max_per_page

    def _resolve_per_page(self, requested: Optional[int]) -> int:
        if requested is None:
            return self._default_per_page
        return max(1, min(int(requested), self._max_per_page))

    async def search(
        self,
        caller_user_id: Any,
        filters: SearchFilters,
        *,
        as_of: Optional[date] = None,
    ) -> SearchResponse:
        """Search opposite-gender profiles for ``caller_user_id``.

        Request problems raise ``SearchValidationError`` before the stores are
        touched. Store failures surface as ``SearchFailedError``.
        """

        caller_id = parse_object_id(caller_user_id)
        if caller_id is None:
            raise SearchValidationError("User ID is required to determine search gender")
        if not filters.has_age_bound:
            raise SearchValidationError("At least one of minAge or maxAge is required")

        requested_gender: Optional[Gender] = None
        if provided(filters.gender):
            requested_gender = normalize_gender(filters.gender)
            if requested_gender is None:
                raise SearchValidationError('gender must be either "male" or "female"')

        per_page = self._resolve_per_page(filters.per_page)

        try:
            return await self._run(caller_id, filters, requested_gender, per_page, as_of)
        except (PyMongoError, RepositoryError, ValidationError) as exc:
            LOGGER.exception("search.failed caller=%s: %s", caller_id, type(exc).__name__)
            raise SearchFailedError() from exc

    async def _run(
        self,
        caller_id: ObjectId,
        filters: SearchFilters,
        requested_gender: Optional[Gender],
        per_page: int,
        as_of: Optional[date],
    ) -> SearchResponse:
        page = filters.page

        caller_profile = await self._profiles.get_by_user_id(caller_id)
        if caller_profile is None:
            raise ProfileIncompleteError(
                "User profile not found. Please complete your profile first by visiting the profile page."
            )
        target_gender = target_gender_for(caller_profile.gender)
        if requested_gender is not None and requested_gender != target_gender:
            raise SearchValidationError(f"You can only search for {target_gender} profiles")

        dob_range = age_range_to_dob_range(filters.min_age, filters.max_age, as_of=as_of)

        owner_ids: Optional[List[ObjectId]] = None
        member_id = (filters.member_id or "").strip()
        if member_id:
            owner_ids = [user.id for user in await self._users.find_by_member_id(member_id)]

        candidate = build_candidate_filter(
            target_gender,
            filters,
            caller_id=caller_id,
            owner_ids=owner_ids,
            dob_range=dob_range,
        )
        self._log_filter(caller_id, candidate)

        if candidate.matches_nothing:
            return self._response(filters, [], page=page, per_page=per_page, total=0)

        profiles, total = await asyncio.gather(
            self._profiles.find(candidate.query, skip=(page - 1) * per_page, limit=per_page),
            self._count_active_matches(candidate.query),
        )
        LOGGER.debug("search.fetched caller=%s page=%s profiles=%s total=%s", caller_id, page, len(profiles), total)

        page_owner_ids = list(
            dict.fromkeys(p.user_id for p in profiles if p.user_id != caller_id)
        )
        if not page_owner_ids:
            return self._response(filters, [], page=page, per_page=per_page, total=total)

        active_users = await self._users.find_by_ids(page_owner_ids, status=UserStatus.ACTIVE)
        users_by_id: Dict[ObjectId, UserDocument] = {user.id: user for user in active_users}

        results: List[SearchResult] = []
        excluded: Dict[str, int] = {}
        for profile in profiles:
            user = users_by_id.get(profile.user_id)
            if user is None or profile.user_id == caller_id:
                excluded["inactive owner"] = excluded.get("inactive owner", 0) + 1
                continue
            reason = candidate_rejection_reason(profile, target_gender, dob_range)
            if reason is not None:
                LOGGER.info("search.excluded profile=%s reason=%s", profile.id, reason)
                excluded[reason] = excluded.get(reason, 0) + 1
                continue
            results.append(build_search_result(profile, user, as_of=as_of))

        if excluded:
            LOGGER.debug("search.excluded_summary caller=%s %s", caller_id, excluded)

        return self._response(filters, results, page=page, per_page=per_page, total=total)

    async def _count_active_matches(self, query: Dict[str, Any]) -> int:
        # A profile-only count would include profiles owned by inactive accounts.
        owners = await self._profiles.owner_ids(query)
        if not owners:
            return 0
        active = await self._users.find_by_ids(owners, status=UserStatus.ACTIVE)
        return await self._profiles.count_owned_by(query, [user.id for user in active])

    @staticmethod
    def _log_filter(caller_id: ObjectId, candidate: CandidateFilter) -> None:
        LOGGER.info(
            "search.filter_built caller=%s target=%s clauses=%s",
            caller_id,
            candidate.target_gender,
            ",".join(candidate.applied) or "-",
        )
        for clause, value in candidate.dropped.items():
            LOGGER.warning(
                "search.clause_dropped caller=%s clause=%s value=%r target=%s",
                caller_id,
                clause,
                value,
                candidate.target_gender,
            )
        if candidate.matches_nothing:
            LOGGER.info("search.short_circuit caller=%s reason=member id lookup empty", caller_id)

    @staticmethod
    def _response(
        filters: SearchFilters,
        results: List[SearchResult],
        *,
        page: int,
        per_page: int,
        total: int,
    ) -> SearchResponse:
        return SearchResponse(
            status="success",
            filters_received=filters.received(),
            data=results,
            meta=SearchMeta(
                current_page=page,
                last_page=last_page_for(total, per_page),
                per_page=per_page,
                total=total,
            ),
        )


def get_search_service() -> SearchService:
    settings = get_settings()
    db = get_db()
    return SearchService(
        ProfileRepository(db),
        UserRepository(db),
        default_per_page=settings.search_default_per_page,
        max_per_page=settings.search_max_per_page,
    )


__all__ = [
    "SearchService",
    "build_search_result",
    "candidate_rejection_reason",
    "get_search_service",
    "last_page_for",
]
