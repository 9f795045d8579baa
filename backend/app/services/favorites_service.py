"""
Favorites Service for the festival archive.

Manages favorite screenings (the hearts that feed the personal timetable):
listing, toggling and the priority cycle used on the timetable.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.favorite_screening import FavoriteScreening
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog.timetable import get_next_priority

logger = logging.getLogger(__name__)

FAVORITE_FIELDS = ("priority", "sort_order")


def serialize_favorite(favorite: FavoriteScreening, include_id: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "screening_id": favorite.screening_id,
        "priority": favorite.priority,
        "sort_order": favorite.sort_order,
    }
    if include_id:
        data = {"id": favorite.id, **data}
    return data


class FavoriteScreeningService(BaseService):
    """
    Service for managing favorite screenings.

    Screening ids refer to the static catalog and are not checked against it,
    so favorites survive catalog reloads that drop a screening.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.favorite_repository = RepositoryFactory.create_favorite_screening_repository(db)

    @BaseService.measure_operation("get_favorites")
    def get_favorites(self, user_id: str, screening_ids: Optional[Sequence[str]]) -> List[Dict[str, Any]]:
        """The user's favorites among ``screening_ids``; no ids means no items."""
        ids = [s.strip() for s in (screening_ids or []) if s and s.strip()]
        if not ids:
            return []
        return [serialize_favorite(f) for f in self.favorite_repository.get_user_favorites(user_id, ids)]

    @BaseService.measure_operation("list_favorites")
    def list_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        return [
            serialize_favorite(f, include_id=True)
            for f in self.favorite_repository.get_user_favorites(user_id)
        ]

    @BaseService.measure_operation("set_favorite")
    def set_favorite(
        self,
        user_id: str,
        screening_id: Optional[str],
        favorite: bool = True,
        updates: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Favorite or unfavorite a screening.

        Args:
            user_id: Owner
            screening_id: Catalog screening id
            favorite: False removes the favorite (a no-op when absent)
            updates: ``priority``/``sort_order`` values to write; absent keys
                keep their stored value

        Returns:
            The saved favorite, or None after a removal
        """
        if not screening_id:
            raise ValidationException("screeningId required", code="SCREENING_ID_REQUIRED")

        if not favorite:
            with self.transaction():
                removed = self.favorite_repository.remove(user_id, screening_id)
            self.log_operation("unfavorite_screening", user_id=user_id, screening_id=screening_id, removed=removed)
            return None

        fields = {k: v for k, v in (updates or {}).items() if k in FAVORITE_FIELDS}
        with self.transaction():
            saved = self.favorite_repository.upsert(user_id, screening_id, **fields)
        self.log_operation("favorite_screening", user_id=user_id, screening_id=screening_id)
        return serialize_favorite(saved, include_id=True)

    @BaseService.measure_operation("cycle_priority")
    def cycle_priority(self, user_id: str, screening_id: str) -> Dict[str, Any]:
        """Advance the favorite's priority 0/unset -> 1 -> 2 -> 0."""
        current = self.favorite_repository.get_favorite(user_id, screening_id)
        if current is None:
            raise NotFoundException("Favorite not found", code="FAVORITE_NOT_FOUND")
        with self.transaction():
            saved = self.favorite_repository.upsert(
                user_id, screening_id, priority=get_next_priority(current.priority)
            )
        return serialize_favorite(saved, include_id=True)
