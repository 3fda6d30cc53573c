from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

import bcrypt
import jwt

from ..config import get_settings
from ..db import get_db
from ..models.identifiers import parse_object_id
from ..models.user import (
    UserDocument,
    UserLoginRequest,
    UserSignupRequest,
    UserStatus,
)
from ..repositories.exceptions import DuplicateKeyRepositoryError, NotFoundRepositoryError
from ..repositories.user import UserRepository

_MEMBER_ID_ATTEMPTS = 5


class RateLimiter:
    """Fixed-window attempt counter per key, kept in process memory."""

    def __init__(self, window_seconds: int, max_attempts: int) -> None:
        self._window = float(window_seconds)
        self._max_attempts = max_attempts
        # key -> (attempts, window expiry)
        self._windows: Dict[str, Tuple[int, float]] = {}

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, expires) in self._windows.items() if expires <= now]
        for key in expired:
            del self._windows[key]

    def increment(self, key: str) -> bool:
        now = time.time()
        self._prune(now)
        attempts, expires = self._windows.get(key, (0, now + self._window))
        attempts += 1
        self._windows[key] = (attempts, expires)
        return attempts <= self._max_attempts

    @property
    def tracked_keys(self) -> int:
        return len(self._windows)


class AccountService:
    """Registration, login and bearer-token resolution for member accounts."""

    def __init__(
        self,
        repository: UserRepository,
        *,
        jwt_secret: str,
        token_ttl_seconds: int,
        rate_limiter: RateLimiter,
    ) -> None:
        self._repository = repository
        self._jwt_secret = jwt_secret
        self._token_ttl = token_ttl_seconds
        self._rate_limiter = rate_limiter

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    @staticmethod
    def hash_password(raw: str) -> str:
        salt = bcrypt.gensalt()
        return bcrypt.hashpw(raw.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(raw: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(raw.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False

    def allow_rate(self, key: str) -> bool:
        return self._rate_limiter.increment(key)

    def issue_token(self, user: UserDocument) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "memberId": user.member_id,
            "iat": now,
            "exp": now + self._token_ttl,
        }
        return jwt.encode(payload, self._jwt_secret, algorithm="HS256")

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(token, self._jwt_secret, algorithms=["HS256"])
        except jwt.PyJWTError:
            return None

    async def get_user_from_token(self, token: str) -> Optional[UserDocument]:
        if not token:
            return None
        payload = self.decode_token(token)
        if not payload:
            return None
        user_id = parse_object_id(payload.get("sub"))
        if user_id is None:
            return None
        return await self._repository.get_by_id(user_id)

    async def register_user(self, payload: UserSignupRequest) -> UserDocument:
        email = payload.email.strip().lower()
        if not email:
            raise ValueError("email required")
        if await self._repository.get_by_email(email):
            raise DuplicateKeyRepositoryError("email already registered", field="email")

        hashed = self.hash_password(payload.password)
        now_ms = self._now_ms()
        # Member ids are sequential; a concurrent registration can take the
        # same number, so retry on the unique index.
        for _ in range(_MEMBER_ID_ATTEMPTS):
            member_id = await self._repository.next_member_id()
            try:
                return await self._repository.create_user(
                    email=email,
                    password_hash=hashed,
                    member_id=member_id,
                    role=payload.role.value,
                    created_at=now_ms,
                )
            except DuplicateKeyRepositoryError as exc:
                if exc.field != "memberId":
                    raise
        raise DuplicateKeyRepositoryError("could not allocate member id", field="memberId")

    async def authenticate_user(self, payload: UserLoginRequest) -> UserDocument:
        email = payload.email.strip().lower()
        if not email:
            raise ValueError("email required")
        user = await self._repository.get_by_email(email)
        if not user:
            raise NotFoundRepositoryError("user not found")
        if not self.verify_password(payload.password, user.password_hash):
            raise PermissionError("invalid credentials")
        if user.status == UserStatus.SUSPENDED.value:
            raise PermissionError("account suspended")
        return user

    async def set_status(self, user_id: str, status: UserStatus) -> UserDocument:
        oid = parse_object_id(user_id)
        if oid is None:
            raise NotFoundRepositoryError("user not found")
        return await self._repository.update_status(oid, status, updated_at=self._now_ms())


_rate_limiter: Optional[RateLimiter] = None


def _shared_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_settings()
        _rate_limiter = RateLimiter(settings.auth_rate_limit_window, settings.auth_rate_limit_max)
    return _rate_limiter


def get_account_service() -> AccountService:
    settings = get_settings()
    repository = UserRepository(get_db())
    return AccountService(
        repository,
        jwt_secret=settings.jwt_secret,
        token_ttl_seconds=settings.auth_token_ttl,
        rate_limiter=_shared_rate_limiter(),
    )


__all__ = ["AccountService", "RateLimiter", "get_account_service"]
