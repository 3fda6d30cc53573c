"""Selectable profile values shared with the frontend."""

from typing import Dict, List

from ..search.gender import GENDERS
from ..search.marital_status import (
    ALL_MARITAL_STATUSES,
    FEMALE_MARITAL_STATUSES,
    MALE_MARITAL_STATUSES,
)

RELIGIONS = ("الإسلام", "المسيحية", "أخرى")

EDUCATION_LEVELS = (
    "غير متعلم",
    "ابتدائي",
    "متوسط",
    "ثانوي",
    "دبلوم",
    "بكالوريوس",
    "ماجستير",
    "دكتوراه",
)

OCCUPATIONS = (
    "طبيب",
    "ممرضة",
    "مهندس",
    "معلم",
    "مهندس برمجيات",
    "محاسب",
    "محامي",
    "مهندس مدني",
    "مهندس معماري",
    "مهندس كهرباء",
    "محاضر جامعي",
    "مدير مشاريع",
    "رائد أعمال",
    "ربة منزل",
    "طالب",
    "موظف حكومي",
    "موظف قطاع خاص",
    "أعمال حرة",
    "أخرى",
)

RELIGIOSITY_LEVELS = ("منخفض", "متوسط", "ملتزم", "ملتزم جدا")

MARRIAGE_TYPES = ("زواج تقليدي", "زواج بشروط خاصة")

POLYGAMY_OPTIONS = ("اقبل بالتعدد", "لا اقبل بالتعدد", "حسب الظروف")

COMPATIBILITY_OPTIONS = ("نعم", "لا")


def profile_options() -> Dict[str, object]:
    marital: Dict[str, List[str]] = {
        "all": list(ALL_MARITAL_STATUSES),
        "female": list(FEMALE_MARITAL_STATUSES),
        "male": list(MALE_MARITAL_STATUSES),
    }
    return {
        "genders": list(GENDERS),
        "religions": list(RELIGIONS),
        "educationLevels": list(EDUCATION_LEVELS),
        "occupations": list(OCCUPATIONS),
        "maritalStatuses": marital,
        "religiosityLevels": list(RELIGIOSITY_LEVELS),
        "marriageTypes": list(MARRIAGE_TYPES),
        "polygamyOptions": list(POLYGAMY_OPTIONS),
        "compatibilityOptions": list(COMPATIBILITY_OPTIONS),
    }


__all__ = [
    "COMPATIBILITY_OPTIONS",
    "EDUCATION_LEVELS",
    "MARRIAGE_TYPES",
    "OCCUPATIONS",
    "POLYGAMY_OPTIONS",
    "RELIGIONS",
    "RELIGIOSITY_LEVELS",
    "profile_options",
]
