"""One-off data repair for legacy profile rows."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from ..db import get_db
from ..db.mongo import ensure_indexes
from ..models.fields import parse_lenient_datetime, to_epoch_ms
from ..repositories.profile import ProfileRepository
from ..search.gender import normalize_gender

LOGGER = logging.getLogger("uvicorn.error")

_TIMESTAMP_FIELDS = ("createdAt", "updatedAt")


class NormalizationReport(BaseModel):
    scanned: int = 0
    gender_updated: int = 0
    gender_cleared: int = 0
    dob_updated: int = 0
    dob_cleared: int = 0
    timestamps_updated: int = 0
    unchanged: int = 0
    dry_run: bool = False


class MaintenanceService:
    def __init__(self, profile_repo: ProfileRepository, database: AsyncIOMotorDatabase) -> None:
        self._profiles = profile_repo
        self._database = database

    async def ensure_indexes(self) -> None:
        await ensure_indexes(self._database)

    async def normalize_profiles(self, *, dry_run: bool = False) -> NormalizationReport:
        """Rewrite gender to its canonical value and repair dateOfBirth and timestamps.

        Unrecognizable genders and unparseable dates become null so that
        search treats them as unmatchable instead of guessing. ``createdAt`` and
        ``updatedAt`` become epoch milliseconds; newest-first ordering breaks
        when numbers and BSON dates are mixed.
        """

        report = NormalizationReport(dry_run=dry_run)
        projection = {"gender": 1, "dateOfBirth": 1, "createdAt": 1, "updatedAt": 1}
        async for doc in self._profiles.iter_raw(projection=projection):
            report.scanned += 1
            updates: Dict[str, Any] = {}

            current_gender = doc.get("gender")
            gender = normalize_gender(current_gender)
            if gender != current_gender:
                if gender is None:
                    updates["gender"] = None
                    report.gender_cleared += 1
                    LOGGER.warning("Profile %s: clearing unrecognized gender %r", doc["_id"], current_gender)
                else:
                    updates["gender"] = gender
                    report.gender_updated += 1

            current_dob = doc.get("dateOfBirth")
            if current_dob is not None and not isinstance(current_dob, datetime):
                dob = parse_lenient_datetime(current_dob)
                updates["dateOfBirth"] = dob
                if dob is None:
                    report.dob_cleared += 1
                    LOGGER.warning("Profile %s: clearing invalid dateOfBirth %r", doc["_id"], current_dob)
                else:
                    report.dob_updated += 1

            stamps = {
                name: to_epoch_ms(doc[name])
                for name in _TIMESTAMP_FIELDS
                if name in doc and (isinstance(doc[name], bool) or not isinstance(doc[name], int))
            }
            if stamps:
                updates.update(stamps)
                report.timestamps_updated += 1

            if not updates:
                report.unchanged += 1
                continue
            if not dry_run:
                await self._profiles.set_fields(doc["_id"], updates)

        LOGGER.info("Profile normalization finished: %s", report.model_dump())
        return report


def get_maintenance_service() -> MaintenanceService:
    db = get_db()
    return MaintenanceService(ProfileRepository(db), db)


__all__ = ["MaintenanceService", "NormalizationReport", "get_maintenance_service"]
