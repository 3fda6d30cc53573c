from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..models.favorite import FavoriteCreateRequest, FavoriteEntry
from ..models.user import UserDocument
from ..repositories.exceptions import NotFoundRepositoryError
from ..services.favorite_service import FavoriteService, SelfFavoriteError, get_favorite_service
from .auth import require_current_user

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[FavoriteEntry])
async def list_favorites(
    current_user: UserDocument = Depends(require_current_user),
    service: FavoriteService = Depends(get_favorite_service),
):
    return await service.list_for_user(str(current_user.id))


@router.post("", response_model=List[FavoriteEntry])
async def add_favorite(
    body: FavoriteCreateRequest,
    current_user: UserDocument = Depends(require_current_user),
    service: FavoriteService = Depends(get_favorite_service),
):
    try:
        return await service.add(str(current_user.id), body.target_user_id, body.note)
    except SelfFavoriteError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from None
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="user not found") from None


@router.delete("/{target_user_id}", response_model=List[FavoriteEntry])
async def remove_favorite(
    target_user_id: str,
    current_user: UserDocument = Depends(require_current_user),
    service: FavoriteService = Depends(get_favorite_service),
):
    return await service.remove(str(current_user.id), target_user_id)


__all__ = ["router"]
