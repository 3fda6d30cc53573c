from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from .collections import (
    FAVORITES_COLLECTION,
    PREFERENCES_COLLECTION,
    PROFILES_COLLECTION,
    USERS_COLLECTION,
)


async def ensure_user_indexes(db: AsyncIOMotorDatabase) -> None:
    collection = db[USERS_COLLECTION]
    await collection.create_index([("email", ASCENDING)], name="users_email_unique", unique=True)
    # Legacy accounts may lack a member id; only real ids must be unique.
    await collection.create_index(
        [("memberId", ASCENDING)],
        name="users_member_id_unique",
        unique=True,
        partialFilterExpression={"memberId": {"$type": "string"}},
    )
    await collection.create_index([("status", ASCENDING)], name="users_status_idx")


async def ensure_profile_indexes(db: AsyncIOMotorDatabase) -> None:
    collection = db[PROFILES_COLLECTION]
    # One profile per user
    await collection.create_index([("user", ASCENDING)], name="profiles_user_unique", unique=True)
    await collection.create_index(
        [("createdAt", DESCENDING), ("_id", DESCENDING)],
        name="profiles_created_desc_idx",
    )
    await collection.create_index(
        [("gender", ASCENDING), ("dateOfBirth", ASCENDING)],
        name="profiles_gender_dob_idx",
    )


async def ensure_preference_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[PREFERENCES_COLLECTION].create_index(
        [("user", ASCENDING)], name="preferences_user_unique", unique=True
    )


async def ensure_favorite_indexes(db: AsyncIOMotorDatabase) -> None:
    collection = db[FAVORITES_COLLECTION]
    await collection.create_index(
        [("user", ASCENDING), ("target", ASCENDING)],
        name="favorites_user_target_unique",
        unique=True,
    )
    await collection.create_index(
        [("user", ASCENDING), ("createdAt", DESCENDING)],
        name="favorites_user_created_idx",
    )


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await ensure_user_indexes(db)
    await ensure_profile_indexes(db)
    await ensure_preference_indexes(db)
    await ensure_favorite_indexes(db)


__all__ = [
    "ensure_favorite_indexes",
    "ensure_indexes",
    "ensure_preference_indexes",
    "ensure_profile_indexes",
    "ensure_user_indexes",
]
