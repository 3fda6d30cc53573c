"""Gender-aware marital status normalization.

Arabic marital statuses are grammatically gendered ("single" is عزباء for a
woman and أعزب for a man). Compound statuses that carry a children or
separation qualifier are written the same way for both genders.
"""

from __future__ import annotations

from typing import Any, Optional

from .gender import FEMALE, MALE, Gender

SHARED_MARITAL_STATUSES: tuple[str, ...] = (
    "مطلق - بدون أولاد",
    "مطلق - مع أولاد",
    "منفصل بدون طلاق",
    "أرمل - بدون أولاد",
    "أرمل - مع أولاد",
)

FEMALE_MARITAL_STATUSES: tuple[str, ...] = ("عزباء", "مطلقة", "أرملة") + SHARED_MARITAL_STATUSES
MALE_MARITAL_STATUSES: tuple[str, ...] = ("أعزب", "مطلق", "أرمل") + SHARED_MARITAL_STATUSES

ALL_MARITAL_STATUSES: tuple[str, ...] = (
    "عزباء",
    "أعزب",
    "مطلقة",
    "مطلق",
    "أرملة",
    "أرمل",
) + SHARED_MARITAL_STATUSES

GENDER_NEUTRAL_MARKERS: tuple[str, ...] = ("بدون أولاد", "مع أولاد", "منفصل")

# Keyed by both spellings so a wrong-gender value maps back as easily as a
# correct one.
_BARE_STATUS_MAP: dict[str, dict[Gender, str]] = {
    "عزباء": {FEMALE: "عزباء", MALE: "أعزب"},
    "أعزب": {FEMALE: "عزباء", MALE: "أعزب"},
    "مطلقة": {FEMALE: "مطلقة", MALE: "مطلق"},
    "مطلق": {FEMALE: "مطلقة", MALE: "مطلق"},
    "أرملة": {FEMALE: "أرملة", MALE: "أرمل"},
    "أرمل": {FEMALE: "أرملة", MALE: "أرمل"},
}

_VALID_BY_GENDER: dict[Gender, tuple[str, ...]] = {
    FEMALE: FEMALE_MARITAL_STATUSES,
    MALE: MALE_MARITAL_STATUSES,
}


def valid_statuses_for(gender: Gender) -> tuple[str, ...]:
    return _VALID_BY_GENDER[gender]


def is_gender_neutral(status: str) -> bool:
    return any(marker in status for marker in GENDER_NEUTRAL_MARKERS)


def normalize_marital_status(status: Any, gender: Gender) -> Optional[str]:
    """Return the spelling of ``status`` that matches ``gender``.

    Qualified statuses and unmapped values pass through unchanged (trimmed).
    Empty input returns None.
    """

    if not isinstance(status, str):
        return None
    text = status.strip()
    if not text:
        return None
    if is_gender_neutral(text):
        return text
    mapped = _BARE_STATUS_MAP.get(text)
    if mapped:
        return mapped[gender]
    return text


def is_valid_for(status: Any, gender: Gender) -> bool:
    if not isinstance(status, str):
        return False
    return status.strip() in _VALID_BY_GENDER[gender]


__all__ = [
    "ALL_MARITAL_STATUSES",
    "FEMALE_MARITAL_STATUSES",
    "GENDER_NEUTRAL_MARKERS",
    "MALE_MARITAL_STATUSES",
    "SHARED_MARITAL_STATUSES",
    "is_gender_neutral",
    "is_valid_for",
    "normalize_marital_status",
    "valid_statuses_for",
]
