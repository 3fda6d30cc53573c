from __future__ import annotations

import time
from typing import Any, Dict, Optional

from ..db import get_db
from ..models.identifiers import parse_object_id
from ..models.preference import PreferenceDocument, PreferenceUpsert
from ..repositories.exceptions import NotFoundRepositoryError
from ..repositories.preference import PreferenceRepository
from ..search.marital_status import normalize_marital_status

_FIELDS: Dict[str, str] = {
    "gender": "gender",
    "min_age": "minAge",
    "max_age": "maxAge",
    "nationality": "nationality",
    "city": "city",
    "religiosity_level": "religiosityLevel",
    "marital_status": "maritalStatus",
    "tribe": "tribe",
}


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


class PreferenceService:
    """Read and upsert the partner preferences each user keeps."""

    def __init__(self, repository: PreferenceRepository) -> None:
        self._repository = repository

    async def get_for_user(self, user_id: str) -> Optional[PreferenceDocument]:
        owner = parse_object_id(user_id)
        if owner is None:
            return None
        return await self._repository.get_by_user_id(owner)

    async def upsert(self, user_id: str, payload: PreferenceUpsert) -> PreferenceDocument:
        """Apply the fields present in ``payload``; absent fields keep their stored value."""

        owner = parse_object_id(user_id)
        if owner is None:
            raise NotFoundRepositoryError("user not found")
        existing = await self._repository.get_by_user_id(owner)

        updates: Dict[str, Any] = {}
        for attr, stored in _FIELDS.items():
            if attr in payload.model_fields_set:
                updates[stored] = _clean(getattr(payload, attr))

        min_age = updates.get("minAge", existing.min_age if existing else None)
        max_age = updates.get("maxAge", existing.max_age if existing else None)
        if min_age is not None and max_age is not None and min_age > max_age:
            raise ValueError("minAge must be less than or equal to maxAge")

        gender = updates.get("gender", existing.gender if existing else None)
        status = updates.get("maritalStatus", existing.marital_status if existing else None)
        if gender and status and ("gender" in updates or "maritalStatus" in updates):
            updates["maritalStatus"] = normalize_marital_status(status, gender)

        return await self._repository.upsert(owner, updates, now=int(time.time() * 1000))


def get_preference_service() -> PreferenceService:
    return PreferenceService(PreferenceRepository(get_db()))


__all__ = ["PreferenceService", "get_preference_service"]
