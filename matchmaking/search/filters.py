"""Build the profile-store query for a candidate search.

Everything here is pure: the caller resolves member ids and the age window
beforehand and passes plain values in, so the builder can be tested without a
database.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from ..models.search import SearchFilters
from .age import DobRange, age_range_to_dob_range
from .gender import Gender, gender_query_pattern
from .marital_status import is_valid_for, normalize_marital_status

ALL_SENTINEL = "all"

# (SearchFilters attribute, stored field)
EXACT_MATCH_FIELDS: tuple[tuple[str, str], ...] = (
    ("city", "city"),
    ("nationality", "nationality"),
    ("country_of_residence", "countryOfResidence"),
    ("education", "education"),
    ("occupation", "occupation"),
    ("religion", "religion"),
    ("religiosity_level", "religiosityLevel"),
    ("marriage_type", "marriageType"),
    ("polygamy_acceptance", "polygamyAcceptance"),
    ("compatibility_test", "compatibilityTest"),
)

KEYWORD_FIELDS: tuple[str, ...] = ("firstName", "lastName", "about", "city", "nationality")

MATCH_NOTHING: Dict[str, Any] = {"_id": {"$in": []}}


class CandidateFilter(BaseModel):
    """Output of the builder: the store query plus what went into it."""

    model_config = ConfigDict(frozen=True)

    query: Dict[str, Any]
    target_gender: Gender
    dob_range: DobRange
    matches_nothing: bool = False
    applied: List[str] = Field(default_factory=list)
    dropped: Dict[str, str] = Field(default_factory=dict)


def provided(value: Any) -> Optional[str]:
    """Return the trimmed value, or None for blanks and the ``all`` sentinel."""

    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == ALL_SENTINEL:
        return None
    return text


def exact_ci(value: str) -> Dict[str, str]:
    """Case-insensitive exact match that ignores surrounding whitespace."""

    return {"$regex": rf"^\s*{re.escape(value)}\s*$", "$options": "i"}


def contains_ci(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def build_candidate_filter(
    target_gender: Gender,
    filters: SearchFilters,
    *,
    caller_id: ObjectId,
    owner_ids: Optional[Iterable[ObjectId]] = None,
    dob_range: Optional[DobRange] = None,
    as_of: Optional[date] = None,
) -> CandidateFilter:
    """Assemble the profile query for ``target_gender``.

    ``owner_ids`` is the pre-resolved member-id lookup; pass None when the
    caller did not ask for one. An empty lookup yields a filter flagged
    ``matches_nothing``.
    """

    if dob_range is None:
        dob_range = age_range_to_dob_range(filters.min_age, filters.max_age, as_of=as_of)

    query: Dict[str, Any] = {
        "gender": {"$regex": gender_query_pattern(target_gender), "$options": "i"},
    }
    applied: List[str] = ["gender"]
    dropped: Dict[str, str] = {}

    if dob_range.is_bounded:
        query["dateOfBirth"] = dob_range.as_query()
        applied.append("dateOfBirth")

    if filters.min_height is not None or filters.max_height is not None:
        height: Dict[str, float] = {}
        if filters.min_height is not None:
            height["$gte"] = filters.min_height
        if filters.max_height is not None:
            height["$lte"] = filters.max_height
        query["height"] = height
        applied.append("height")

    for attr, stored_field in EXACT_MATCH_FIELDS:
        value = provided(getattr(filters, attr))
        if value is not None:
            query[stored_field] = exact_ci(value)
            applied.append(stored_field)

    requested_status = provided(filters.marital_status)
    if requested_status is not None:
        normalized = normalize_marital_status(requested_status, target_gender)
        if normalized is not None and is_valid_for(normalized, target_gender):
            query["maritalStatus"] = exact_ci(normalized)
            applied.append("maritalStatus")
        else:
            dropped["maritalStatus"] = requested_status

    if filters.has_photo:
        query["photoUrl"] = {"$exists": True, "$nin": [None, ""]}
        applied.append("photoUrl")

    keyword = (filters.keyword or "").strip()
    if keyword:
        query["$or"] = [{name: contains_ci(keyword)} for name in KEYWORD_FIELDS]
        applied.append("keyword")

    if owner_ids is not None:
        allowed = [oid for oid in dict.fromkeys(owner_ids) if oid != caller_id]
        if not allowed:
            return CandidateFilter(
                query=dict(MATCH_NOTHING),
                target_gender=target_gender,
                dob_range=dob_range,
                matches_nothing=True,
                applied=applied,
                dropped=dropped,
            )
        query["user"] = {"$in": allowed}
        applied.append("memberId")
    else:
        query["user"] = {"$ne": caller_id}

    return CandidateFilter(
        query=query,
        target_gender=target_gender,
        dob_range=dob_range,
        applied=applied,
        dropped=dropped,
    )


__all__ = [
    "ALL_SENTINEL",
    "CandidateFilter",
    "EXACT_MATCH_FIELDS",
    "KEYWORD_FIELDS",
    "MATCH_NOTHING",
    "build_candidate_filter",
    "contains_ci",
    "exact_ci",
    "provided",
]
