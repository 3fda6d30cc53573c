"""Partner preference endpoints for the authenticated user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..models.preference import Preference, PreferenceUpsert
from ..models.user import UserDocument
from ..repositories.exceptions import NotFoundRepositoryError
from ..services.preference_service import PreferenceService, get_preference_service
from .auth import require_current_user

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=Preference)
async def my_preferences(
    current_user: UserDocument = Depends(require_current_user),
    service: PreferenceService = Depends(get_preference_service),
) -> Preference:
    document = await service.get_for_user(str(current_user.id))
    if not document:
        raise HTTPException(status_code=404, detail="preferences not found")
    return Preference.from_document(document)


@router.put("", response_model=Preference)
async def upsert_preferences(
    payload: PreferenceUpsert,
    current_user: UserDocument = Depends(require_current_user),
    service: PreferenceService = Depends(get_preference_service),
) -> Preference:
    try:
        document = await service.upsert(str(current_user.id), payload)
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="user not found") from None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Preference.from_document(document)


__all__ = ["router"]
