from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from ..models.user import (
    AuthTokenResponse,
    UserDocument,
    UserLoginRequest,
    UserSignupRequest,
    UserSummary,
)
from ..repositories.exceptions import (
    DuplicateKeyRepositoryError,
    NotFoundRepositoryError,
)
from ..services.account_service import (
    AccountService,
    get_account_service,
)


router = APIRouter()


def _extract_token(authorization: str) -> str:
    if not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")
    return token


async def require_current_user(
    authorization: str = Header(default=""),
    service: AccountService = Depends(get_account_service),
) -> UserDocument:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="authorization required")
    token = _extract_token(authorization)
    user = await service.get_user_from_token(token)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid token")
    return user


@router.post("/auth/register", response_model=AuthTokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: UserSignupRequest,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    ip = request.client.host if request.client else "unknown"
    if not service.allow_rate(f"register:{ip}"):
        raise HTTPException(status_code=429, detail="rate limit exceeded")
    try:
        user = await service.register_user(body)
    except DuplicateKeyRepositoryError:
        raise HTTPException(status_code=409, detail="email already registered") from None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    token = service.issue_token(user)
    return AuthTokenResponse(token=token, user=UserSummary.from_document(user))


@router.post("/auth/login", response_model=AuthTokenResponse)
async def login(
    body: UserLoginRequest,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    ip = request.client.host if request.client else "unknown"
    if not service.allow_rate(f"login:{ip}"):
        raise HTTPException(status_code=429, detail="rate limit exceeded")
    try:
        user = await service.authenticate_user(body)
    except NotFoundRepositoryError:
        raise HTTPException(status_code=404, detail="user not found") from None
    except PermissionError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    token = service.issue_token(user)
    return AuthTokenResponse(token=token, user=UserSummary.from_document(user))


@router.get("/users/me", response_model=UserSummary)
async def me(current_user: UserDocument = Depends(require_current_user)):
    return UserSummary.from_document(current_user)


__all__ = ["require_current_user", "router"]
