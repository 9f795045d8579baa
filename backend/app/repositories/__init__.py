# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the festival archive.

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_user_entry_repository(db)
    entry = repository.get_for_user_film(user_id, film_id)
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory
from .favorite_screening_repository import FavoriteScreeningRepository
from .login_attempt_repository import LoginAttemptRepository
from .privacy_repository import PrivacyRepository
from .social_repository import BlockRepository, FollowRepository
from .user_entry_repository import EntryLikeRepository, UserEntryRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BlockRepository",
    "EntryLikeRepository",
    "FavoriteScreeningRepository",
    "FollowRepository",
    "IRepository",
    "LoginAttemptRepository",
    "PrivacyRepository",
    "RepositoryFactory",
    "UserEntryRepository",
    "UserRepository",
]
