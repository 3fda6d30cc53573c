"""Repository helpers for the ``favorites`` collection."""

from __future__ import annotations

from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import DESCENDING

from ..db.collections import FAVORITES_COLLECTION
from ..models.favorite import FavoriteDocument


class FavoriteRepository:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._database = database
        self._collection: AsyncIOMotorCollection = database[FAVORITES_COLLECTION]

    async def add(self, user_id: ObjectId, target_id: ObjectId, *, note: Optional[str], now: int) -> None:
        """Save ``target_id`` for ``user_id``; saving it again only replaces the note."""

        await self._collection.update_one(
            {"user": user_id, "target": target_id},
            {
                "$set": {"note": note},
                "$setOnInsert": {"user": user_id, "target": target_id, "createdAt": now},
            },
            upsert=True,
        )

    async def remove(self, user_id: ObjectId, target_id: ObjectId) -> bool:
        result = await self._collection.delete_one({"user": user_id, "target": target_id})
        return bool(result.deleted_count)

    async def list_for_user(self, user_id: ObjectId) -> List[FavoriteDocument]:
        cursor = self._collection.find({"user": user_id}).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        docs = await cursor.to_list(length=None)
        return [FavoriteDocument(**doc) for doc in docs]


__all__ = ["FavoriteRepository"]
