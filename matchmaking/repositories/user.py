"""Repository helpers for the ``users`` collection."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..db.collections import USERS_COLLECTION
from ..models.user import UserDocument, UserStatus
from .exceptions import DuplicateKeyRepositoryError, NotFoundRepositoryError

LOGGER = logging.getLogger("uvicorn.error")

MEMBER_ID_PREFIX = "MAW-"
_MEMBER_ID_RE = re.compile(r"^MAW-(\d{6})$")


def format_member_id(number: int) -> str:
    return f"{MEMBER_ID_PREFIX}{number:06d}"


def to_user_document(doc: Optional[dict]) -> Optional[UserDocument]:
    """Parse a raw account; rows too broken to parse are logged and skipped."""

    if not doc:
        return None
    try:
        return UserDocument(**doc)
    except ValidationError as exc:
        LOGGER.warning("Skipping unreadable user %s: %s", doc.get("_id"), exc.error_count())
        return None


class UserRepository:
    """Thin abstraction over the account collection."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._database = database
        self._collection: AsyncIOMotorCollection = database[USERS_COLLECTION]

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    async def get_by_id(self, user_id: ObjectId) -> Optional[UserDocument]:
        doc = await self._collection.find_one({"_id": user_id})
        return to_user_document(doc)

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        doc = await self._collection.find_one({"email": email.strip().lower()})
        return to_user_document(doc)

    async def find_by_ids(
        self,
        ids: Iterable[ObjectId],
        *,
        status: Optional[UserStatus] = None,
    ) -> List[UserDocument]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        query: dict[str, object] = {"_id": {"$in": id_list}}
        if status is not None:
            query["status"] = status.value
        docs = await self._collection.find(query).to_list(length=len(id_list))
        return [user for user in map(to_user_document, docs) if user is not None]

    async def find_by_member_id(self, member_id: str) -> List[UserDocument]:
        docs = await self._collection.find({"memberId": member_id.strip()}).to_list(length=None)
        return [user for user in map(to_user_document, docs) if user is not None]

    async def next_member_id(self) -> str:
        cursor = (
            self._collection.find(
                {"memberId": {"$regex": _MEMBER_ID_RE.pattern}},
                projection={"memberId": 1},
            )
            .sort("memberId", DESCENDING)
            .limit(1)
        )
        latest = await cursor.to_list(length=1)
        next_number = 1
        if latest:
            match = _MEMBER_ID_RE.match(str(latest[0].get("memberId") or ""))
            if match:
                next_number = int(match.group(1)) + 1
        return format_member_id(next_number)

    async def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        member_id: str,
        role: str,
        created_at: int,
        status: UserStatus = UserStatus.PENDING,
    ) -> UserDocument:
        """Insert a new account document."""

        doc = {
            "_id": ObjectId(),
            "email": email.strip().lower(),
            "passwordHash": password_hash,
            "memberId": member_id,
            "role": role,
            "status": status.value,
            "membershipPlanId": "basic",
            "createdAt": created_at,
            "updatedAt": created_at,
        }
        try:
            await self._collection.insert_one(doc)
        except DuplicateKeyError as exc:
            field = "memberId" if "memberId" in str(exc) else "email"
            LOGGER.debug("Duplicate user insertion for %s", field)
            raise DuplicateKeyRepositoryError(f"{field} already exists", field=field) from exc
        return UserDocument(**doc)

    async def update_status(self, user_id: ObjectId, status: UserStatus, *, updated_at: int) -> UserDocument:
        doc = await self._collection.find_one_and_update(
            {"_id": user_id},
            {"$set": {"status": status.value, "updatedAt": updated_at}},
            return_document=ReturnDocument.AFTER,
        )
        user = to_user_document(doc)
        if user is None:
            raise NotFoundRepositoryError("user not found")
        return user


__all__ = ["MEMBER_ID_PREFIX", "UserRepository", "format_member_id", "to_user_document"]
