from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..search.gender import normalize_gender
from .fields import LenientDatetime, LenientNumber, LenientTimestamp
from .identifiers import PyObjectId


class ProfileDocument(BaseModel):
    """Profile document stored in the ``profiles`` collection.

    Gender and marital status are kept as stored; historical rows use mixed
    spellings, so readers normalize them instead of trusting the raw value.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    user_id: PyObjectId = Field(alias="user")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    gender: Optional[str] = None
    date_of_birth: LenientDatetime = Field(default=None, alias="dateOfBirth")
    nationality: Optional[str] = None
    city: Optional[str] = None
    country_of_residence: Optional[str] = Field(default=None, alias="countryOfResidence")
    height: LenientNumber = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    religion: Optional[str] = None
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    marriage_type: Optional[str] = Field(default=None, alias="marriageType")
    polygamy_acceptance: Optional[str] = Field(default=None, alias="polygamyAcceptance")
    compatibility_test: Optional[str] = Field(default=None, alias="compatibilityTest")
    about: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    is_verified: bool = Field(default=False, alias="isVerified")
    created_at: LenientTimestamp = Field(default=0, alias="createdAt")
    updated_at: LenientTimestamp = Field(default=0, alias="updatedAt")


class Profile(BaseModel):
    """Public representation of a profile returned via the API."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    user_id: PyObjectId = Field(alias="userId")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    gender: Optional[str] = None
    date_of_birth: Optional[datetime] = Field(default=None, alias="dateOfBirth")
    nationality: Optional[str] = None
    city: Optional[str] = None
    country_of_residence: Optional[str] = Field(default=None, alias="countryOfResidence")
    height: Optional[float] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    religion: Optional[str] = None
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    marriage_type: Optional[str] = Field(default=None, alias="marriageType")
    polygamy_acceptance: Optional[str] = Field(default=None, alias="polygamyAcceptance")
    compatibility_test: Optional[str] = Field(default=None, alias="compatibilityTest")
    about: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    is_verified: bool = Field(default=False, alias="isVerified")
    created_at: int = Field(default=0, alias="createdAt")
    updated_at: int = Field(default=0, alias="updatedAt")

    @classmethod
    def from_document(cls, doc: ProfileDocument) -> "Profile":
        data = doc.model_dump(exclude={"id", "user_id"})
        return cls(id=doc.id, user_id=doc.user_id, **data)


class ProfileFields(BaseModel):
    """Optional profile fields shared by create and update payloads."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=120)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=120)
    nationality: Optional[str] = Field(default=None, max_length=120)
    city: Optional[str] = Field(default=None, max_length=120)
    country_of_residence: Optional[str] = Field(default=None, alias="countryOfResidence", max_length=120)
    height: Optional[float] = Field(default=None, ge=100, le=250)
    education: Optional[str] = Field(default=None, max_length=120)
    occupation: Optional[str] = Field(default=None, max_length=120)
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel", max_length=120)
    religion: Optional[str] = Field(default=None, max_length=120)
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus", max_length=120)
    marriage_type: Optional[str] = Field(default=None, alias="marriageType", max_length=120)
    polygamy_acceptance: Optional[str] = Field(default=None, alias="polygamyAcceptance", max_length=120)
    compatibility_test: Optional[str] = Field(default=None, alias="compatibilityTest", max_length=120)
    about: Optional[str] = Field(default=None, max_length=2000)
    guardian_name: Optional[str] = Field(default=None, alias="guardianName", max_length=120)
    guardian_contact: Optional[str] = Field(default=None, alias="guardianContact", max_length=120)


class ProfileCreateRequest(ProfileFields):
    """Payload for the one-time profile creation."""

    gender: str = Field(min_length=1)
    date_of_birth: date = Field(alias="dateOfBirth")
    city: str = Field(min_length=1, max_length=120)
    nationality: str = Field(min_length=1, max_length=120)
    marital_status: str = Field(alias="maritalStatus", min_length=1, max_length=120)

    @field_validator("gender")
    @classmethod
    def _gender_known(cls, value: str) -> str:
        normalized = normalize_gender(value)
        if normalized is None:
            raise ValueError('gender must be either "male" or "female"')
        return normalized


class ProfilePatch(ProfileFields):
    """Mutable fields for partial profile updates."""

    gender: Optional[str] = None
    date_of_birth: Optional[date] = Field(default=None, alias="dateOfBirth")


__all__ = [
    "Profile",
    "ProfileCreateRequest",
    "ProfileDocument",
    "ProfileFields",
    "ProfilePatch",
]
