from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .fields import LenientTimestamp
from .identifiers import PyObjectId
from .profile import Profile


class FavoriteDocument(BaseModel):
    """A saved (user, target) pair in the ``favorites`` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    user_id: PyObjectId = Field(alias="user")
    target_id: PyObjectId = Field(alias="target")
    note: Optional[str] = None
    created_at: LenientTimestamp = Field(default=0, alias="createdAt")


class FavoriteCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_user_id: str = Field(alias="targetUserId", min_length=1)
    note: Optional[str] = Field(default=None, max_length=500)


class FavoriteTarget(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    email: str
    role: Optional[str] = None
    profile: Optional[Profile] = None


class FavoriteEntry(BaseModel):
    """One favorite with its target account and profile joined in."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    created_at: int = Field(default=0, alias="createdAt")
    note: Optional[str] = None
    target: FavoriteTarget


FavoriteList = List[FavoriteEntry]

__all__ = [
    "FavoriteCreateRequest",
    "FavoriteDocument",
    "FavoriteEntry",
    "FavoriteList",
    "FavoriteTarget",
]
