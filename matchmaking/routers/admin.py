from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from ..config import get_settings
from ..models.user import UserStatusPatch, UserSummary
from ..repositories.exceptions import NotFoundRepositoryError
from ..services.account_service import AccountService, get_account_service
from ..services.maintenance_service import (
    MaintenanceService,
    NormalizationReport,
    get_maintenance_service,
)

router = APIRouter(prefix="/admin")


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    token: str = Query(default=""),
) -> None:
    """Simple shared-secret guard; with ADMIN_TOKEN unset only the gateway should reach these routes."""

    admin_token = get_settings().admin_token
    supplied = x_admin_token or token
    if admin_token and supplied != admin_token:
        raise HTTPException(status_code=401, detail="unauthorized")


@router.post("/ensure-indexes", dependencies=[Depends(require_admin)])
async def ensure_indexes(service: MaintenanceService = Depends(get_maintenance_service)):
    await service.ensure_indexes()
    return {"ok": True}


@router.post(
    "/profiles/normalize",
    response_model=NormalizationReport,
    dependencies=[Depends(require_admin)],
)
async def normalize_profiles(
    dry_run: bool = Query(default=False, alias="dryRun"),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    """Rewrite legacy gender spellings and repair unparseable birth dates."""

    return await service.normalize_profiles(dry_run=dry_run)


@router.patch(
    "/users/{user_id}/status",
    response_model=UserSummary,
    dependencies=[Depends(require_admin)],
)
async def set_user_status(
    user_id: str,
    body: UserStatusPatch,
    service: AccountService = Depends(get_account_service),
):
    try:
        user = await service.set_status(user_id, body.status)
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="user not found") from None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return UserSummary.from_document(user)


__all__ = ["require_admin", "router"]
