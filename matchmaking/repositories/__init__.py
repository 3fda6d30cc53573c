"""Repository layer to abstract MongoDB access patterns."""

from .favorite import FavoriteRepository
from .preference import PreferenceRepository
from .profile import ProfileRepository
from .user import UserRepository

__all__ = ["FavoriteRepository", "PreferenceRepository", "ProfileRepository", "UserRepository"]
