from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..search.gender import normalize_gender
from .fields import LenientNumber, LenientTimestamp
from .identifiers import PyObjectId


class PreferenceDocument(BaseModel):
    """Partner preferences stored in the ``preferences`` collection, one per user."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    user_id: PyObjectId = Field(alias="user")
    gender: Optional[str] = None
    min_age: LenientNumber = Field(default=None, alias="minAge")
    max_age: LenientNumber = Field(default=None, alias="maxAge")
    nationality: Optional[str] = None
    city: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    tribe: Optional[str] = None
    created_at: LenientTimestamp = Field(default=0, alias="createdAt")
    updated_at: LenientTimestamp = Field(default=0, alias="updatedAt")


class Preference(BaseModel):
    """Public representation of the caller's preferences."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    user_id: PyObjectId = Field(alias="userId")
    gender: Optional[str] = None
    min_age: Optional[int] = Field(default=None, alias="minAge")
    max_age: Optional[int] = Field(default=None, alias="maxAge")
    nationality: Optional[str] = None
    city: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    tribe: Optional[str] = None
    created_at: int = Field(default=0, alias="createdAt")
    updated_at: int = Field(default=0, alias="updatedAt")

    @classmethod
    def from_document(cls, doc: PreferenceDocument) -> "Preference":
        return cls(
            id=doc.id,
            user_id=doc.user_id,
            gender=doc.gender,
            min_age=int(doc.min_age) if doc.min_age is not None else None,
            max_age=int(doc.max_age) if doc.max_age is not None else None,
            nationality=doc.nationality,
            city=doc.city,
            religiosity_level=doc.religiosity_level,
            marital_status=doc.marital_status,
            tribe=doc.tribe,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


class PreferenceUpsert(BaseModel):
    """Fields a user may set on their preferences; omitted fields keep their value."""

    model_config = ConfigDict(populate_by_name=True)

    gender: Optional[str] = None
    min_age: Optional[int] = Field(default=None, alias="minAge", ge=18, le=80)
    max_age: Optional[int] = Field(default=None, alias="maxAge", ge=18, le=80)
    nationality: Optional[str] = Field(default=None, max_length=120)
    city: Optional[str] = Field(default=None, max_length=120)
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel", max_length=120)
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus", max_length=120)
    tribe: Optional[str] = Field(default=None, max_length=120)

    @field_validator("gender")
    @classmethod
    def _gender_known(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = normalize_gender(value)
        if normalized is None:
            raise ValueError('gender must be either "male" or "female"')
        return normalized

    @model_validator(mode="after")
    def _age_order(self) -> "PreferenceUpsert":
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("minAge must be less than or equal to maxAge")
        return self


__all__ = ["Preference", "PreferenceDocument", "PreferenceUpsert"]
