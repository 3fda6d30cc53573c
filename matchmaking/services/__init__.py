from .account_service import AccountService, get_account_service
from .favorite_service import FavoriteService, get_favorite_service
from .maintenance_service import MaintenanceService, get_maintenance_service
from .preference_service import PreferenceService, get_preference_service
from .profile_service import ProfileService, get_profile_service
from .search_service import SearchService, get_search_service

__all__ = [
    "AccountService",
    "FavoriteService",
    "MaintenanceService",
    "PreferenceService",
    "ProfileService",
    "SearchService",
    "get_account_service",
    "get_favorite_service",
    "get_maintenance_service",
    "get_preference_service",
    "get_profile_service",
    "get_search_service",
]
