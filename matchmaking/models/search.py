from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..search.age import MAX_SEARCH_AGE, MIN_SEARCH_AGE
from .identifiers import PyObjectId
from .user import UserSummary


class SearchFilters(BaseModel):
    """Caller-supplied search criteria.

    ``gender`` is optional and only cross-checked: the searched gender always
    comes from the caller's own profile.
    """

    model_config = ConfigDict(populate_by_name=True)

    gender: Optional[str] = None
    min_age: Optional[int] = Field(default=None, alias="minAge", ge=MIN_SEARCH_AGE, le=MAX_SEARCH_AGE)
    max_age: Optional[int] = Field(default=None, alias="maxAge", ge=MIN_SEARCH_AGE, le=MAX_SEARCH_AGE)
    min_height: Optional[float] = Field(default=None, alias="minHeight", ge=100, le=250)
    max_height: Optional[float] = Field(default=None, alias="maxHeight", ge=100, le=250)
    city: Optional[str] = None
    nationality: Optional[str] = None
    country_of_residence: Optional[str] = Field(default=None, alias="countryOfResidence")
    education: Optional[str] = None
    occupation: Optional[str] = None
    religion: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    marriage_type: Optional[str] = Field(default=None, alias="marriageType")
    polygamy_acceptance: Optional[str] = Field(default=None, alias="polygamyAcceptance")
    compatibility_test: Optional[str] = Field(default=None, alias="compatibilityTest")
    has_photo: Optional[bool] = Field(default=None, alias="hasPhoto")
    keyword: Optional[str] = None
    member_id: Optional[str] = Field(default=None, alias="memberId")
    page: int = Field(default=1, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1, le=100)

    @model_validator(mode="after")
    def _check_ranges(self) -> "SearchFilters":
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("minAge must be less than or equal to maxAge")
        if (
            self.min_height is not None
            and self.max_height is not None
            and self.min_height > self.max_height
        ):
            raise ValueError("minHeight must be less than or equal to maxHeight")
        return self

    @property
    def has_age_bound(self) -> bool:
        return self.min_age is not None or self.max_age is not None

    def received(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchResultProfile(BaseModel):
    """Profile projection returned for each search hit."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    gender: str
    age: Optional[int] = None
    nationality: Optional[str] = None
    city: Optional[str] = None
    country_of_residence: Optional[str] = Field(default=None, alias="countryOfResidence")
    education: Optional[str] = None
    occupation: Optional[str] = None
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    marriage_type: Optional[str] = Field(default=None, alias="marriageType")
    polygamy_acceptance: Optional[str] = Field(default=None, alias="polygamyAcceptance")
    compatibility_test: Optional[str] = Field(default=None, alias="compatibilityTest")
    religion: Optional[str] = None
    religiosity_level: Optional[str] = Field(default=None, alias="religiosityLevel")
    about: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    date_of_birth: Optional[datetime] = Field(default=None, alias="dateOfBirth")
    height: Optional[float] = None


class SearchResult(BaseModel):
    user: UserSummary
    profile: SearchResultProfile


class SearchMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int


class SearchResponse(BaseModel):
    status: str = "success"
    filters_received: Dict[str, Any] = Field(default_factory=dict)
    data: List[SearchResult] = Field(default_factory=list)
    meta: SearchMeta


__all__ = [
    "SearchFilters",
    "SearchMeta",
    "SearchResponse",
    "SearchResult",
    "SearchResultProfile",
]
