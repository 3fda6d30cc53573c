import os
from functools import lru_cache
from pydantic import BaseModel, Field
from pathlib import Path as _Path

from dotenv import load_dotenv as _load_dotenv

_load_dotenv(dotenv_path=_Path(__file__).resolve().parent.parent / ".env", override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings(BaseModel):
    # Support multiple common env var names for Mongo connection string
    mongo_uri: str = Field(
        default_factory=lambda: (
            os.getenv("MONGO_URI")
            or os.getenv("MONGODB_URI")
            or os.getenv("MONGO_URL")
            or ""
        )
    )
    mongo_db: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "matchmaking"))
    # Optional: provide a non-SRV fallback URI (e.g., mongodb://127.0.0.1:27017)
    mongo_alt_uri: str = Field(default_factory=lambda: os.getenv("MONGO_ALT_URI", ""))
    # Optional: force direct connection (applies to non-SRV URIs)
    mongo_direct: bool = Field(default_factory=lambda: _env_flag("MONGO_DIRECT"))
    cors_origins: str = Field(
        default_factory=lambda: os.getenv("CORS_ORIGINS")
        or os.getenv("CORS_ORIGIN")
        or "http://localhost:5173,http://127.0.0.1:5173"
    )
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8081")))
    slow_request_ms: int = Field(default_factory=lambda: int(os.getenv("SLOW_REQUEST_MS", "800")))

    # Auth
    jwt_secret: str = Field(default_factory=lambda: os.getenv("JWT_SECRET", "change-me"))
    auth_token_ttl: int = Field(default_factory=lambda: int(os.getenv("AUTH_TOKEN_TTL", str(7 * 24 * 3600))))
    auth_rate_limit_window: int = Field(default_factory=lambda: int(os.getenv("AUTH_RATE_LIMIT_WINDOW", "60")))
    auth_rate_limit_max: int = Field(default_factory=lambda: int(os.getenv("AUTH_RATE_LIMIT_MAX", "20")))
    admin_token: str = Field(default_factory=lambda: os.getenv("ADMIN_TOKEN", ""))

    # Search paging
    search_default_per_page: int = Field(default_factory=lambda: int(os.getenv("SEARCH_DEFAULT_PER_PAGE", "20")))
    search_max_per_page: int = Field(default_factory=lambda: int(os.getenv("SEARCH_MAX_PER_PAGE", "100")))

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
