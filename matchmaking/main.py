import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from .config import get_settings
from .db import close_mongo_connection, connect_to_mongo, is_connected
from .routers import admin, auth, favorites, preferences, profiles, search

LOGGER = logging.getLogger("uvicorn.error")

app = FastAPI(title="Matchmaking Search API", default_response_class=ORJSONResponse)
settings = get_settings()

LOGGER.info("[CORS] allow_origins=%s", settings.allowed_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)
app.add_middleware(GZipMiddleware, minimum_size=512)


# Simple slow-request logger
@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    t0 = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - t0) * 1000
    if elapsed_ms >= get_settings().slow_request_ms:
        LOGGER.warning(
            "[perf] slow request %s %s %dms status=%s",
            request.method,
            request.url.path,
            int(elapsed_ms),
            response.status_code,
        )
    return response


@app.on_event("startup")
async def startup():
    await connect_to_mongo()


@app.on_event("shutdown")
async def shutdown():
    await close_mongo_connection()


# Routers
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(profiles.router, prefix="/api", tags=["profiles"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(preferences.router, prefix="/api", tags=["preferences"])
app.include_router(favorites.router, prefix="/api", tags=["favorites"])
app.include_router(admin.router, prefix="/api", tags=["admin"])


@app.get("/")
async def root():
    return {"status": "matchmaking-api-ok"}


@app.get("/api/health/db")
async def db_health():
    return {
        "mongo": "connected" if is_connected() else "disconnected",
        "db": str(get_settings().mongo_db),
    }
