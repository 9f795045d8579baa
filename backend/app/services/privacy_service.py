# backend/app/services/privacy_service.py
"""
Privacy Service for the festival archive.

Stores who may see a user's ratings and reviews, and answers visibility
questions for the social features (film reviews, feed, profiles).

Visibility levels:
    private  - only the owner
    friends  - the owner and users who follow the owner and are followed back
    public   - everyone
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import (
    VISIBILITY_FRIENDS,
    VISIBILITY_PRIVATE,
    VISIBILITY_PUBLIC,
    VISIBILITY_VALUES,
)
from ..core.exceptions import ValidationException
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def can_view(owner_id: str, viewer_id: Optional[str], visibility: str, is_mutual: bool = False) -> bool:
    """Whether ``viewer_id`` may see data the owner shares at ``visibility``."""
    if viewer_id and owner_id == viewer_id:
        return True
    if visibility == VISIBILITY_PUBLIC:
        return True
    if visibility == VISIBILITY_FRIENDS:
        return bool(viewer_id) and is_mutual
    return False


@dataclass(frozen=True)
class Visibility:
    rating: bool
    review: bool


class PrivacyService(BaseService):
    """Service for privacy settings and visibility checks."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.privacy_repository = RepositoryFactory.create_privacy_repository(db)
        self.follow_repository = RepositoryFactory.create_follow_repository(db)

    @staticmethod
    def _serialize(user_id: str, rating_visibility: str, review_visibility: str) -> Dict[str, Any]:
        return {
            "user_id": user_id,
            "rating_visibility": rating_visibility,
            "review_visibility": review_visibility,
        }

    @BaseService.measure_operation("get_privacy")
    def get_settings(self, user_id: str) -> Dict[str, Any]:
        """Stored settings, or private/private when the user never saved any."""
        row = self.privacy_repository.get_for_user(user_id)
        if row is None:
            return self._serialize(user_id, VISIBILITY_PRIVATE, VISIBILITY_PRIVATE)
        return self._serialize(user_id, row.rating_visibility, row.review_visibility)

    @BaseService.measure_operation("update_privacy")
    def update_settings(
        self,
        user_id: str,
        rating_visibility: Optional[str] = None,
        review_visibility: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Save the provided fields.

        Raises:
            ValidationException: an invalid value, or nothing to change
        """
        if rating_visibility is not None and rating_visibility not in VISIBILITY_VALUES:
            raise ValidationException("invalid ratingVisibility", code="INVALID_RATING_VISIBILITY")
        if review_visibility is not None and review_visibility not in VISIBILITY_VALUES:
            raise ValidationException("invalid reviewVisibility", code="INVALID_REVIEW_VISIBILITY")
        if rating_visibility is None and review_visibility is None:
            raise ValidationException("no changes", code="NO_CHANGES")

        with self.transaction():
            row = self.privacy_repository.upsert(
                user_id,
                rating_visibility=rating_visibility,
                review_visibility=review_visibility,
            )
        self.log_operation(
            "update_privacy",
            user_id=user_id,
            rating_visibility=row.rating_visibility,
            review_visibility=row.review_visibility,
        )
        return self._serialize(user_id, row.rating_visibility, row.review_visibility)

    def is_mutual(self, user_a: str, user_b: str) -> bool:
        return self.follow_repository.is_following(user_a, user_b) and self.follow_repository.is_following(
            user_b, user_a
        )

    def visibility_for(self, owner_ids: Sequence[str], viewer_id: Optional[str]) -> Dict[str, Visibility]:
        """Rating/review visibility of each owner towards the viewer, in three queries."""
        owners = list(dict.fromkeys(owner_ids))
        if not owners:
            return {}

        rows = self.privacy_repository.get_for_users(owners)
        mutual: set = set()
        if viewer_id:
            mutual = self.follow_repository.following_ids(viewer_id, among=owners) & (
                self.follow_repository.follower_ids(viewer_id, among=owners)
            )

        result: Dict[str, Visibility] = {}
        for owner_id in owners:
            row = rows.get(owner_id)
            rating_vis = row.rating_visibility if row else VISIBILITY_PRIVATE
            review_vis = row.review_visibility if row else VISIBILITY_PRIVATE
            is_mutual = owner_id in mutual
            result[owner_id] = Visibility(
                rating=can_view(owner_id, viewer_id, rating_vis, is_mutual),
                review=can_view(owner_id, viewer_id, review_vis, is_mutual),
            )
        return result
