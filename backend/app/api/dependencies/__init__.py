"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, get_current_user_optional
from .database import get_db
from .services import (
    get_account_service,
    get_auth_service,
    get_catalog_browse_service,
    get_catalog_store,
    get_favorite_screening_service,
    get_planner_service,
    get_privacy_service,
    get_review_service,
    get_social_service,
    get_timetable_service,
    get_user_entry_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_current_user_optional",
    # Database
    "get_db",
    # Services
    "get_account_service",
    "get_auth_service",
    "get_catalog_browse_service",
    "get_catalog_store",
    "get_favorite_screening_service",
    "get_planner_service",
    "get_privacy_service",
    "get_review_service",
    "get_social_service",
    "get_timetable_service",
    "get_user_entry_service",
]
