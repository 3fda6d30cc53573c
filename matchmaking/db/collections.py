"""MongoDB collection names used by the matchmaking service."""

from __future__ import annotations

USERS_COLLECTION = "users"
PROFILES_COLLECTION = "profiles"
PREFERENCES_COLLECTION = "preferences"
FAVORITES_COLLECTION = "favorites"

__all__ = [
    "USERS_COLLECTION",
    "PROFILES_COLLECTION",
    "PREFERENCES_COLLECTION",
    "FAVORITES_COLLECTION",
]
