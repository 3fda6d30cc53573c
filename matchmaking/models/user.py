from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .fields import LenientTimestamp
from .identifiers import PyObjectId


class UserRole(str, Enum):
    """Account role. Informational only; search never reads it."""

    FEMALE = "female"
    MALE = "male"
    CONSULTANT = "consultant"
    ADMIN = "admin"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserSignupRequest(BaseModel):
    """Payload for creating a new account via the public registration flow."""

    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    role: UserRole = UserRole.MALE


class UserLoginRequest(BaseModel):
    """Credentials provided during login."""

    email: str
    password: str


class UserDocument(BaseModel):
    """Account record stored in the ``users`` collection."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    email: str
    password_hash: str = Field(default="", alias="passwordHash")
    member_id: Optional[str] = Field(default=None, alias="memberId")
    role: Optional[str] = None
    status: str = UserStatus.PENDING.value
    membership_plan_id: str = Field(default="basic", alias="membershipPlanId")
    created_at: LenientTimestamp = Field(default=0, alias="createdAt")
    updated_at: LenientTimestamp = Field(default=0, alias="updatedAt")

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value


class UserSummary(BaseModel):
    """Sanitized account view; never carries the password hash."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    email: str
    role: Optional[str] = None
    status: str
    member_id: Optional[str] = Field(default=None, alias="memberId")

    @classmethod
    def from_document(cls, doc: UserDocument) -> "UserSummary":
        return cls(
            id=doc.id,
            email=doc.email,
            role=doc.role,
            status=doc.status,
            member_id=doc.member_id,
        )


class AuthTokenResponse(BaseModel):
    """Response envelope for authentication endpoints."""

    token: str
    user: UserSummary


class UserStatusPatch(BaseModel):
    status: UserStatus


__all__ = [
    "AuthTokenResponse",
    "UserDocument",
    "UserLoginRequest",
    "UserRole",
    "UserSignupRequest",
    "UserStatus",
    "UserStatusPatch",
    "UserSummary",
]
