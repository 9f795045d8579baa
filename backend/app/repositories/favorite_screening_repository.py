# backend/app/repositories/favorite_screening_repository.py
"""
Favorite Screening Repository for the festival archive.

Favorites are keyed by (user_id, screening_id); screening ids point into the
static catalog and are not foreign keys.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.favorite_screening import FavoriteScreening
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_UNSET = object()


class FavoriteScreeningRepository(BaseRepository[FavoriteScreening]):
    """Repository for favorite screening markers."""

    def __init__(self, db: Session):
        super().__init__(db, FavoriteScreening)
        self.logger = logging.getLogger(__name__)

    def get_favorite(self, user_id: str, screening_id: str) -> Optional[FavoriteScreening]:
        try:
            return (
                self.db.query(FavoriteScreening)
                .filter(
                    FavoriteScreening.user_id == user_id,
                    FavoriteScreening.screening_id == screening_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading favorite {screening_id} for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load favorite: {str(e)}")

    def get_user_favorites(
        self, user_id: str, screening_ids: Optional[Sequence[str]] = None
    ) -> List[FavoriteScreening]:
        """All of the user's favorites, or only those among ``screening_ids``."""
        query = self.db.query(FavoriteScreening).filter(FavoriteScreening.user_id == user_id)
        if screening_ids is not None:
            if not screening_ids:
                return []
            query = query.filter(FavoriteScreening.screening_id.in_(list(screening_ids)))
        query = query.order_by(FavoriteScreening.created_at.asc(), FavoriteScreening.id.asc())
        return self._execute_query(query)

    def upsert(
        self,
        user_id: str,
        screening_id: str,
        priority=_UNSET,
        sort_order=_UNSET,
    ) -> FavoriteScreening:
        """
        Create the favorite or update it in place.

        ``priority`` and ``sort_order`` are only written when passed, so a plain
        re-favorite keeps the existing values.
        """
        favorite = self.get_favorite(user_id, screening_id)
        if favorite is None:
            values = {"user_id": user_id, "screening_id": screening_id}
            if priority is not _UNSET:
                values["priority"] = priority
            if sort_order is not _UNSET:
                values["sort_order"] = sort_order
            return self.create(**values)
        try:
            if priority is not _UNSET:
                favorite.priority = priority
            if sort_order is not _UNSET:
                favorite.sort_order = sort_order
            self.db.flush()
            return favorite
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating favorite {favorite.id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update favorite: {str(e)}")

    def remove(self, user_id: str, screening_id: str) -> bool:
        try:
            deleted = (
                self.db.query(FavoriteScreening)
                .filter(
                    FavoriteScreening.user_id == user_id,
                    FavoriteScreening.screening_id == screening_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return deleted > 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing favorite {screening_id} for user {user_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove favorite: {str(e)}")
