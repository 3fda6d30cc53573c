from __future__ import annotations

import time
from datetime import date, datetime, time as dt_time
from typing import Any, Dict, Optional

from ..db import get_db
from ..models.identifiers import parse_object_id
from ..models.profile import (
    ProfileCreateRequest,
    ProfileDocument,
    ProfileFields,
    ProfilePatch,
)
from ..repositories.exceptions import NotFoundRepositoryError
from ..repositories.profile import ProfileRepository
from ..search.gender import normalize_gender
from ..search.marital_status import normalize_marital_status

# Stored names of the free-text fields accepted from clients.
_TEXT_FIELDS: Dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "nationality": "nationality",
    "city": "city",
    "country_of_residence": "countryOfResidence",
    "education": "education",
    "occupation": "occupation",
    "religiosity_level": "religiosityLevel",
    "religion": "religion",
    "marital_status": "maritalStatus",
    "marriage_type": "marriageType",
    "polygamy_acceptance": "polygamyAcceptance",
    "compatibility_test": "compatibilityTest",
    "about": "about",
    "guardian_name": "guardianName",
    "guardian_contact": "guardianContact",
}


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return None


def _dob_to_datetime(value: date) -> datetime:
    return datetime.combine(value, dt_time.min)


class ProfileService:
    """Create/read/update flows for the one profile each user owns."""

    def __init__(self, repository: ProfileRepository) -> None:
        self._repository = repository

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    @staticmethod
    def _text_updates(payload: ProfileFields, *, only_set: bool) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        for attr, stored in _TEXT_FIELDS.items():
            if only_set and attr not in payload.model_fields_set:
                continue
            value = getattr(payload, attr)
            if value is None and not only_set:
                continue
            updates[stored] = _clean_str(value)
        if "height" in payload.model_fields_set or (not only_set and payload.height is not None):
            updates["height"] = payload.height
        return updates

    async def create_profile(self, user_id: str, payload: ProfileCreateRequest) -> tuple[ProfileDocument, bool]:
        """Create the caller's profile; a repeated create returns the existing one."""

        owner = parse_object_id(user_id)
        if owner is None:
            raise NotFoundRepositoryError("user not found")

        fields = self._text_updates(payload, only_set=False)
        gender = payload.gender
        fields["gender"] = gender
        fields["dateOfBirth"] = _dob_to_datetime(payload.date_of_birth)
        fields["maritalStatus"] = normalize_marital_status(payload.marital_status, gender)
        fields["isVerified"] = False

        return await self._repository.create_if_absent(
            user_id=owner,
            fields={key: value for key, value in fields.items() if value is not None},
            created_at=self._now_ms(),
        )

    async def get_for_user(self, user_id: str) -> Optional[ProfileDocument]:
        owner = parse_object_id(user_id)
        if owner is None:
            return None
        return await self._repository.get_by_user_id(owner)

    async def get_by_identifier(self, identifier: str) -> Optional[ProfileDocument]:
        oid = parse_object_id(identifier)
        if oid is None:
            return None
        return await self._repository.get_by_id_or_user_id(oid)

    async def update_profile(self, user_id: str, patch: ProfilePatch) -> ProfileDocument:
        owner = parse_object_id(user_id)
        if owner is None:
            raise NotFoundRepositoryError("user not found")
        existing = await self._repository.get_by_user_id(owner)
        if existing is None:
            raise NotFoundRepositoryError("profile not found")

        updates = self._text_updates(patch, only_set=True)

        gender = normalize_gender(existing.gender)
        if "gender" in patch.model_fields_set:
            gender = normalize_gender(patch.gender)
            if gender is None:
                raise ValueError('gender must be either "male" or "female"')
            updates["gender"] = gender

        if "date_of_birth" in patch.model_fields_set:
            updates["dateOfBirth"] = _dob_to_datetime(patch.date_of_birth) if patch.date_of_birth else None

        status = updates.get("maritalStatus", existing.marital_status)
        if gender is not None and status:
            normalized_status = normalize_marital_status(status, gender)
            if normalized_status != existing.marital_status or "maritalStatus" in updates:
                updates["maritalStatus"] = normalized_status

        if not updates:
            return existing

        updates["updatedAt"] = self._now_ms()
        return await self._repository.update_by_user_id(owner, updates)


def get_profile_service() -> ProfileService:
    return ProfileService(ProfileRepository(get_db()))


__all__ = ["ProfileService", "get_profile_service"]
