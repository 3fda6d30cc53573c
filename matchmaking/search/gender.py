"""Gender normalization for free-text legacy profile values.

Stored ``gender`` values were written by several clients over time and include
English words, Arabic words, single letters and truncated strings such as
``"malq"``. Everything is mapped onto the closed set ``{"male", "female"}``;
values that cannot be recognized map to ``None`` and are never defaulted.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from .errors import ProfileIncompleteError

Gender = Literal["male", "female"]

MALE: Gender = "male"
FEMALE: Gender = "female"
GENDERS: tuple[Gender, Gender] = (MALE, FEMALE)

ARABIC_GENDER_TOKENS: dict[str, Gender] = {
    "أنثى": FEMALE,
    "أنثي": FEMALE,
    "ذكر": MALE,
    "ذكور": MALE,
}

_EXACT_TOKENS: dict[str, Gender] = {
    "male": MALE,
    "m": MALE,
    "female": FEMALE,
    "f": FEMALE,
}

# Mirrors normalize_gender() so the store pre-filters on every spelling the
# post-fetch check would accept.
_QUERY_PATTERNS: dict[Gender, str] = {
    FEMALE: r"^\s*(?:أنثى|أنثي|f|female)\s*$|fem",
    MALE: r"^\s*(?:ذكر|ذكور|m|male)\s*$|^(?!.*fem).*mal",
}


def normalize_gender(raw: Any) -> Optional[Gender]:
    """Map a stored gender spelling to ``"male"``/``"female"`` or ``None``.

    Arabic exact tokens are checked before the ``fem``/``mal`` substring
    heuristics, and ``fem`` before ``mal`` since ``"female"`` contains both.
    """

    if raw is None or not isinstance(raw, str):
        return None
    text = raw.strip().lower()
    if not text:
        return None

    arabic = ARABIC_GENDER_TOKENS.get(text)
    if arabic:
        return arabic

    if "fem" in text:
        return FEMALE
    if "mal" in text:
        return MALE

    return _EXACT_TOKENS.get(text)


def opposite_gender(gender: Gender) -> Gender:
    return FEMALE if gender == MALE else MALE


def target_gender_for(caller_gender: Any) -> Gender:
    """Return the gender a caller may search for: the opposite of their own."""

    normalized = normalize_gender(caller_gender)
    if normalized is None:
        raise ProfileIncompleteError(
            "User profile missing gender. Please add your gender in the profile page."
        )
    return opposite_gender(normalized)


def gender_query_pattern(gender: Gender) -> str:
    """Regex (case-insensitive) matching every stored spelling of ``gender``."""

    return _QUERY_PATTERNS[gender]


__all__ = [
    "ARABIC_GENDER_TOKENS",
    "FEMALE",
    "GENDERS",
    "Gender",
    "MALE",
    "gender_query_pattern",
    "normalize_gender",
    "opposite_gender",
    "target_gender_for",
]
