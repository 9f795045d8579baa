# backend/app/repositories/factory.py
"""
Repository Factory for the festival archive.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .favorite_screening_repository import FavoriteScreeningRepository
    from .login_attempt_repository import LoginAttemptRepository
    from .privacy_repository import PrivacyRepository
    from .social_repository import BlockRepository, FollowRepository
    from .user_entry_repository import EntryLikeRepository, UserEntryRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_follow_repository(db: Session) -> "FollowRepository":
        from .social_repository import FollowRepository

        return FollowRepository(db)

    @staticmethod
    def create_block_repository(db: Session) -> "BlockRepository":
        from .social_repository import BlockRepository

        return BlockRepository(db)

    @staticmethod
    def create_user_entry_repository(db: Session) -> "UserEntryRepository":
        from .user_entry_repository import UserEntryRepository

        return UserEntryRepository(db)

    @staticmethod
    def create_entry_like_repository(db: Session) -> "EntryLikeRepository":
        from .user_entry_repository import EntryLikeRepository

        return EntryLikeRepository(db)

    @staticmethod
    def create_favorite_screening_repository(db: Session) -> "FavoriteScreeningRepository":
        from .favorite_screening_repository import FavoriteScreeningRepository

        return FavoriteScreeningRepository(db)

    @staticmethod
    def create_privacy_repository(db: Session) -> "PrivacyRepository":
        from .privacy_repository import PrivacyRepository

        return PrivacyRepository(db)

    @staticmethod
    def create_login_attempt_repository(db: Session) -> "LoginAttemptRepository":
        from .login_attempt_repository import LoginAttemptRepository

        return LoginAttemptRepository(db)
