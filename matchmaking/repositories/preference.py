"""Repository helpers for the ``preferences`` collection."""

from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ..db.collections import PREFERENCES_COLLECTION
from ..models.preference import PreferenceDocument
from .exceptions import NotFoundRepositoryError


class PreferenceRepository:
    """One preferences document per user, keyed by ``user``."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._database = database
        self._collection: AsyncIOMotorCollection = database[PREFERENCES_COLLECTION]

    async def get_by_user_id(self, user_id: ObjectId) -> Optional[PreferenceDocument]:
        doc = await self._collection.find_one({"user": user_id})
        if not doc:
            return None
        return PreferenceDocument(**doc)

    async def upsert(self, user_id: ObjectId, updates: Dict[str, Any], *, now: int) -> PreferenceDocument:
        doc = await self._collection.find_one_and_update(
            {"user": user_id},
            {
                "$set": {**updates, "updatedAt": now},
                "$setOnInsert": {"user": user_id, "createdAt": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        if not doc:  # pragma: no cover - Motor returns the doc on upsert
            raise NotFoundRepositoryError("preferences not saved")
        return PreferenceDocument(**doc)


__all__ = ["PreferenceRepository"]
