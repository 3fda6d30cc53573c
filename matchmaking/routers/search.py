from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from ..models.search import SearchFilters, SearchResponse
from ..models.user import UserDocument
from ..search.errors import (
    ProfileIncompleteError,
    SearchFailedError,
    SearchValidationError,
)
from ..services.search_service import SearchService, get_search_service
from .auth import require_current_user

router = APIRouter()


def _validation_message(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        msg = str(error.get("msg", "invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages) or "invalid search filters"


def parse_search_filters(request: Request) -> SearchFilters:
    """Build filters from the query string; blank parameters count as absent."""

    raw: Dict[str, Any] = {}
    for key, value in request.query_params.items():
        if value is None or not str(value).strip():
            continue
        raw[key] = value.strip()
    if "perPage" in raw and "per_page" not in raw:
        raw["per_page"] = raw.pop("perPage")
    try:
        return SearchFilters.model_validate(raw)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=_validation_message(exc)) from None


@router.get("/search", response_model=SearchResponse)
async def search_profiles(
    current_user: UserDocument = Depends(require_current_user),
    filters: SearchFilters = Depends(parse_search_filters),
    service: SearchService = Depends(get_search_service),
):
    try:
        return await service.search(str(current_user.id), filters)
    except (SearchValidationError, ProfileIncompleteError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None
    except SearchFailedError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None


__all__ = ["parse_search_filters", "router"]
