"""Profile REST endpoints; every route acts on the authenticated user."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..models.profile import Profile, ProfileCreateRequest, ProfilePatch
from ..models.profile_options import profile_options
from ..models.user import UserDocument
from ..repositories.exceptions import NotFoundRepositoryError
from ..services.profile_service import ProfileService, get_profile_service
from .auth import require_current_user

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/options")
async def options() -> Dict[str, Any]:
    return profile_options()


@router.post("", response_model=Profile, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: ProfileCreateRequest,
    response: Response,
    current_user: UserDocument = Depends(require_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    try:
        document, created = await service.create_profile(str(current_user.id), payload)
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="user not found") from None
    if not created:
        response.status_code = status.HTTP_200_OK
    return Profile.from_document(document)


@router.get("/me", response_model=Profile)
async def my_profile(
    current_user: UserDocument = Depends(require_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    document = await service.get_for_user(str(current_user.id))
    if not document:
        raise HTTPException(status_code=404, detail="profile not found")
    return Profile.from_document(document)


@router.patch("/me", response_model=Profile)
async def update_my_profile(
    patch: ProfilePatch,
    current_user: UserDocument = Depends(require_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    try:
        document = await service.update_profile(str(current_user.id), patch)
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="profile not found") from None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Profile.from_document(document)


@router.get("/{identifier}", response_model=Profile)
async def get_profile(
    identifier: str,
    _: UserDocument = Depends(require_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """Accepts a profile id or, for older clients, the owning user id."""

    document = await service.get_by_identifier(identifier.strip())
    if not document:
        raise HTTPException(status_code=404, detail="profile not found")
    return Profile.from_document(document)


__all__ = ["router"]
