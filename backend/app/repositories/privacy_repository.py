# backend/app/repositories/privacy_repository.py
"""Privacy settings repository; one row per user, created lazily."""

import logging
from typing import Dict, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import VISIBILITY_PRIVATE
from ..core.exceptions import RepositoryException
from ..models.privacy import UserPrivacy
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PrivacyRepository(BaseRepository[UserPrivacy]):
    """Repository for UserPrivacy rows."""

    def __init__(self, db: Session):
        super().__init__(db, UserPrivacy)
        self.logger = logging.getLogger(__name__)

    def get_for_user(self, user_id: str) -> Optional[UserPrivacy]:
        return self.get_by_id(user_id)

    def get_for_users(self, user_ids: Sequence[str]) -> Dict[str, UserPrivacy]:
        """Stored settings keyed by user id; users without a row are absent."""
        if not user_ids:
            return {}
        try:
            rows = (
                self.db.query(UserPrivacy)
                .filter(UserPrivacy.user_id.in_(list(set(user_ids))))
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading privacy settings: {str(e)}")
            raise RepositoryException(f"Failed to load privacy settings: {str(e)}")
        return {row.user_id: row for row in rows}

    def upsert(
        self,
        user_id: str,
        rating_visibility: Optional[str] = None,
        review_visibility: Optional[str] = None,
    ) -> UserPrivacy:
        """Write the provided fields; a new row defaults the others to private."""
        row = self.get_for_user(user_id)
        if row is None:
            return self.create(
                user_id=user_id,
                rating_visibility=rating_visibility or VISIBILITY_PRIVATE,
                review_visibility=review_visibility or VISIBILITY_PRIVATE,
            )
        try:
            if rating_visibility is not None:
                row.rating_visibility = rating_visibility
            if review_visibility is not None:
                row.review_visibility = review_visibility
            self.db.flush()
            return row
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating privacy of {user_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update privacy: {str(e)}")
