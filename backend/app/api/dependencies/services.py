# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.account_service import AccountService
from ...services.auth_service import AuthService
from ...services.catalog import CatalogStore, get_catalog
from ...services.catalog_browse_service import CatalogBrowseService
from ...services.favorites_service import FavoriteScreeningService
from ...services.planner import PlannerService
from ...services.privacy_service import PrivacyService
from ...services.review_service import ReviewService
from ...services.social_service import SocialService
from ...services.timetable_service import TimetableService
from ...services.user_entry_service import UserEntryService
from .database import get_db

logger = logging.getLogger(__name__)


def get_catalog_store() -> CatalogStore:
    """Process-wide catalog; override in tests to swap the dataset."""
    return get_catalog()


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_catalog_browse_service(
    db: Session = Depends(get_db), store: CatalogStore = Depends(get_catalog_store)
) -> CatalogBrowseService:
    return CatalogBrowseService(db, store=store)


def get_timetable_service(
    db: Session = Depends(get_db), store: CatalogStore = Depends(get_catalog_store)
) -> TimetableService:
    return TimetableService(db, store=store)


def get_favorite_screening_service(db: Session = Depends(get_db)) -> FavoriteScreeningService:
    return FavoriteScreeningService(db)


def get_user_entry_service(db: Session = Depends(get_db)) -> UserEntryService:
    return UserEntryService(db)


def get_review_service(
    db: Session = Depends(get_db), store: CatalogStore = Depends(get_catalog_store)
) -> ReviewService:
    return ReviewService(db, store=store)


def get_privacy_service(db: Session = Depends(get_db)) -> PrivacyService:
    return PrivacyService(db)


def get_social_service(
    db: Session = Depends(get_db), store: CatalogStore = Depends(get_catalog_store)
) -> SocialService:
    return SocialService(db, store=store)


def get_planner_service(
    db: Session = Depends(get_db), store: CatalogStore = Depends(get_catalog_store)
) -> PlannerService:
    """
    Get planner service instance.

    The OpenAI client is created lazily on first use, so requests that fail
    validation never touch the API.
    """
    return PlannerService(db, store=store)
