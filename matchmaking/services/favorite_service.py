from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional

from bson import ObjectId

from ..db import get_db
from ..models.favorite import FavoriteEntry, FavoriteTarget
from ..models.identifiers import parse_object_id
from ..models.profile import Profile
from ..repositories.exceptions import NotFoundRepositoryError
from ..repositories.favorite import FavoriteRepository
from ..repositories.profile import ProfileRepository
from ..repositories.user import UserRepository

LOGGER = logging.getLogger("uvicorn.error")


class SelfFavoriteError(ValueError):
    """Raised when a user tries to save their own account."""


class FavoriteService:
    def __init__(
        self,
        favorite_repo: FavoriteRepository,
        user_repo: UserRepository,
        profile_repo: ProfileRepository,
    ) -> None:
        self._favorites = favorite_repo
        self._users = user_repo
        self._profiles = profile_repo

    async def add(self, user_id: str, target_user_id: str, note: Optional[str] = None) -> List[FavoriteEntry]:
        owner = parse_object_id(user_id)
        target = parse_object_id(target_user_id.strip())
        if owner is None or target is None:
            raise NotFoundRepositoryError("user not found")
        if owner == target:
            raise SelfFavoriteError("cannot add yourself to favorites")

        user, target_user = await asyncio.gather(self._users.get_by_id(owner), self._users.get_by_id(target))
        if user is None or target_user is None:
            raise NotFoundRepositoryError("user not found")

        cleaned = note.strip() if isinstance(note, str) else None
        await self._favorites.add(owner, target, note=cleaned or None, now=int(time.time() * 1000))
        return await self.list_for_user(user_id)

    async def remove(self, user_id: str, target_user_id: str) -> List[FavoriteEntry]:
        owner = parse_object_id(user_id)
        target = parse_object_id(target_user_id.strip())
        if owner is not None and target is not None:
            await self._favorites.remove(owner, target)
        return await self.list_for_user(user_id)

    async def list_for_user(self, user_id: str) -> List[FavoriteEntry]:
        """Newest first, each joined with the target account and its profile."""

        owner = parse_object_id(user_id)
        if owner is None:
            return []
        favorites = await self._favorites.list_for_user(owner)
        if not favorites:
            return []

        target_ids: List[ObjectId] = [favorite.target_id for favorite in favorites]
        users = {user.id: user for user in await self._users.find_by_ids(target_ids)}
        profiles = await asyncio.gather(*(self._profiles.get_by_user_id(oid) for oid in target_ids))
        profile_by_user = {oid: profile for oid, profile in zip(target_ids, profiles)}

        entries: List[FavoriteEntry] = []
        for favorite in favorites:
            target_user = users.get(favorite.target_id)
            if target_user is None:
                LOGGER.info("Favorite %s points at a missing user, skipping", favorite.id)
                continue
            profile = profile_by_user.get(favorite.target_id)
            entries.append(
                FavoriteEntry(
                    id=favorite.id,
                    created_at=favorite.created_at,
                    note=favorite.note,
                    target=FavoriteTarget(
                        id=target_user.id,
                        email=target_user.email,
                        role=target_user.role,
                        profile=Profile.from_document(profile) if profile else None,
                    ),
                )
            )
        return entries


def get_favorite_service() -> FavoriteService:
    database = get_db()
    return FavoriteService(
        FavoriteRepository(database),
        UserRepository(database),
        ProfileRepository(database),
    )


__all__ = ["FavoriteService", "SelfFavoriteError", "get_favorite_service"]
