"""Identifier types shared by the user and profile models."""

from __future__ import annotations

from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return ``value`` as an ObjectId, or None when it is not a valid id."""

    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str):
        text = value.strip()
        if ObjectId.is_valid(text):
            return ObjectId(text)
    return None


def _validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, str) and not value.strip():
        raise ValueError("ObjectId string must not be empty")
    parsed = parse_object_id(value)
    if parsed is None:
        raise ValueError("Invalid ObjectId value")
    return parsed


PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(_validate_object_id),
    PlainSerializer(lambda value: str(value), return_type=str),
]

__all__ = ["PyObjectId", "parse_object_id"]
