"""Repository helpers for the ``profiles`` collection."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..db.collections import PROFILES_COLLECTION
from ..models.profile import ProfileDocument
from .exceptions import NotFoundRepositoryError

LOGGER = logging.getLogger("uvicorn.error")

NEWEST_FIRST: List[Tuple[str, int]] = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def to_profile_document(doc: Optional[Dict[str, Any]]) -> Optional[ProfileDocument]:
    """Parse a raw profile; rows too broken to parse are logged and skipped."""

    if not doc:
        return None
    try:
        return ProfileDocument(**doc)
    except ValidationError as exc:
        LOGGER.warning("Skipping unreadable profile %s: %s", doc.get("_id"), exc.error_count())
        return None


class ProfileRepository:
    """MongoDB access layer for profile documents."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._database = database
        self._collection: AsyncIOMotorCollection = database[PROFILES_COLLECTION]

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    async def get_by_user_id(self, user_id: ObjectId) -> Optional[ProfileDocument]:
        doc = await self._collection.find_one({"user": user_id})
        return to_profile_document(doc)

    async def get_by_id(self, profile_id: ObjectId) -> Optional[ProfileDocument]:
        doc = await self._collection.find_one({"_id": profile_id})
        return to_profile_document(doc)

    async def get_by_id_or_user_id(self, identifier: ObjectId) -> Optional[ProfileDocument]:
        """Look up by profile id first, then by owning user id."""

        profile = await self.get_by_id(identifier)
        if profile:
            return profile
        return await self.get_by_user_id(identifier)

    async def find(
        self,
        query: Dict[str, Any],
        *,
        sort: Sequence[Tuple[str, int]] = NEWEST_FIRST,
        skip: int = 0,
        limit: int = 20,
    ) -> List[ProfileDocument]:
        cursor = self._collection.find(query).sort(list(sort)).skip(int(skip)).limit(int(limit))
        docs = await cursor.to_list(length=int(limit))
        profiles: List[ProfileDocument] = []
        for raw in docs:
            parsed = to_profile_document(raw)
            if parsed is not None:
                profiles.append(parsed)
        return profiles

    async def count(self, query: Dict[str, Any]) -> int:
        return int(await self._collection.count_documents(query))

    async def owner_ids(self, query: Dict[str, Any]) -> List[ObjectId]:
        """Distinct owning user ids of every profile matching ``query``."""

        owners: Dict[ObjectId, None] = {}
        async for doc in self._collection.find(query, projection={"user": 1}):
            owner = doc.get("user")
            if isinstance(owner, ObjectId):
                owners[owner] = None
        return list(owners)

    async def count_owned_by(self, query: Dict[str, Any], owner_ids: Iterable[ObjectId]) -> int:
        """Count matches of ``query`` whose owner is in ``owner_ids``."""

        owners = list(owner_ids)
        if not owners:
            return 0
        return await self.count({"$and": [query, {"user": {"$in": owners}}]})

    async def create_if_absent(
        self,
        *,
        user_id: ObjectId,
        fields: Dict[str, Any],
        created_at: int,
    ) -> Tuple[ProfileDocument, bool]:
        """Create the user's profile unless one exists; returns (profile, created)."""

        existing = await self._collection.find_one({"user": user_id})
        if existing:
            LOGGER.warning("Profile already exists for user %s, returning existing profile", user_id)
            return ProfileDocument(**existing), False

        try:
            doc = await self._collection.find_one_and_update(
                {"user": user_id},
                {
                    "$setOnInsert": {
                        **fields,
                        "user": user_id,
                        "createdAt": created_at,
                        "updatedAt": created_at,
                    },
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:  # pragma: no cover - concurrent create for the same user
            doc = await self._collection.find_one({"user": user_id})
            if not doc:
                raise NotFoundRepositoryError("profile create failed") from None
            return ProfileDocument(**doc), False
        if not doc:  # pragma: no cover - Motor returns the doc on upsert
            raise NotFoundRepositoryError("profile create failed")
        return ProfileDocument(**doc), True

    async def update_by_user_id(self, user_id: ObjectId, updates: Dict[str, Any]) -> ProfileDocument:
        doc = await self._collection.find_one_and_update(
            {"user": user_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundRepositoryError("profile not found")
        return ProfileDocument(**doc)

    async def iter_raw(self, projection: Optional[Dict[str, int]] = None) -> AsyncIterator[Dict[str, Any]]:
        """Yield raw documents, unparsed; used by maintenance jobs."""

        async for doc in self._collection.find({}, projection=projection):
            yield doc

    async def set_fields(self, profile_id: ObjectId, updates: Dict[str, Any]) -> bool:
        result = await self._collection.update_one({"_id": profile_id}, {"$set": updates})
        return bool(result.modified_count)


__all__ = ["NEWEST_FIRST", "ProfileRepository", "to_profile_document"]
