# backend/app/services/user_entry_service.py
"""
UserEntryService: a user's own rating and short review per film.

Ratings run 0.0-5.0 in tenths. A rating of zero or less means "no rating"
and is stored as null; reviews are capped at MAX_SHORT_REVIEW_LENGTH.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_RATING, MAX_SHORT_REVIEW_LENGTH
from ..core.exceptions import ValidationException
from ..models.user_entry import UserEntry
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def normalize_rating(rating: Optional[float]) -> Optional[float]:
    """
    None or <= 0 -> None; otherwise rounded to one decimal.

    Raises:
        ValidationException: rating above MAX_RATING
    """
    if rating is None:
        return None
    value = float(rating)
    if value <= 0:
        return None
    if value > MAX_RATING:
        raise ValidationException(f"rating must be between 0 and {MAX_RATING}", code="INVALID_RATING")
    return round(value, 1)


def normalize_review(short_review: Optional[str]) -> str:
    if not isinstance(short_review, str):
        return ""
    return short_review[:MAX_SHORT_REVIEW_LENGTH]


def serialize_entry(entry: UserEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "film_id": entry.film_id,
        "rating": float(entry.rating) if entry.rating is not None else None,
        "short_review": entry.short_review or "",
        "like_count": entry.like_count or 0,
        "updated_at": entry.updated_at,
    }


class UserEntryService(BaseService):
    """Service for a user's own film entries."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.entry_repository = RepositoryFactory.create_user_entry_repository(db)

    @staticmethod
    def _require_film_id(film_id: Optional[str]) -> str:
        if not film_id or not film_id.strip():
            raise ValidationException("filmId required", code="FILM_ID_REQUIRED")
        return film_id.strip()

    @BaseService.measure_operation("get_entry")
    def get_entry(self, user_id: str, film_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """The user's entry for a film, or None."""
        entry = self.entry_repository.get_for_user_film(user_id, self._require_film_id(film_id))
        return serialize_entry(entry) if entry else None

    @BaseService.measure_operation("upsert_entry")
    def upsert_entry(
        self,
        user_id: str,
        film_id: Optional[str],
        rating: Optional[float] = None,
        short_review: Optional[str] = None,
    ) -> Dict[str, Any]:
        film_id = self._require_film_id(film_id)
        normalized_rating = normalize_rating(rating)
        review = normalize_review(short_review)

        with self.transaction():
            entry = self.entry_repository.upsert(user_id, film_id, normalized_rating, review)
        self.log_operation("upsert_entry", user_id=user_id, film_id=film_id, rating=normalized_rating)
        return serialize_entry(entry)

    @BaseService.measure_operation("delete_entry")
    def delete_entry(self, user_id: str, film_id: Optional[str]) -> bool:
        """Delete the entry; returns False when there was nothing to delete."""
        film_id = self._require_film_id(film_id)
        with self.transaction():
            deleted = self.entry_repository.delete_for_user_film(user_id, film_id)
        return deleted

    @BaseService.measure_operation("list_entries")
    def list_entries(self, user_id: str) -> List[Dict[str, Any]]:
        """Entries with a rating or a non-blank review, newest first."""
        return [serialize_entry(e) for e in self.entry_repository.list_for_user(user_id)]
