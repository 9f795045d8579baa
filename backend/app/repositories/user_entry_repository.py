# backend/app/repositories/user_entry_repository.py
"""
Repositories for film entries (rating + short review) and likes on them.

Entries are keyed by (user_id, film_id). Feed paging uses a keyset on
(updated_at desc, id desc) so pages stay stable while new entries arrive.
"""

from datetime import datetime, timezone
import logging
from typing import Dict, List, Optional, Sequence, Set

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user_entry import EntryLike, UserEntry
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _has_content():
    """Filter clause: the entry has a rating or a non-blank review."""
    return or_(UserEntry.rating.isnot(None), func.length(func.trim(UserEntry.short_review)) > 0)


class UserEntryRepository(BaseRepository[UserEntry]):
    """Repository for UserEntry data access."""

    def __init__(self, db: Session):
        super().__init__(db, UserEntry)
        self.logger = logging.getLogger(__name__)

    def get_for_user_film(self, user_id: str, film_id: str) -> Optional[UserEntry]:
        try:
            return (
                self.db.query(UserEntry)
                .filter(UserEntry.user_id == user_id, UserEntry.film_id == film_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading entry for user {user_id} film {film_id}: {str(e)}")
            raise RepositoryException(f"Failed to load entry: {str(e)}")

    def upsert(
        self, user_id: str, film_id: str, rating: Optional[float], short_review: str
    ) -> UserEntry:
        """Insert or update the user's entry for a film."""
        entry = self.get_for_user_film(user_id, film_id)
        if entry is None:
            return self.create(
                user_id=user_id, film_id=film_id, rating=rating, short_review=short_review
            )
        try:
            entry.rating = rating
            entry.short_review = short_review
            # onupdate skips unchanged rows
            entry.updated_at = datetime.now(timezone.utc)
            self.db.flush()
            return entry
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating entry {entry.id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update entry: {str(e)}")

    def delete_for_user_film(self, user_id: str, film_id: str) -> bool:
        try:
            entry = self.get_for_user_film(user_id, film_id)
            if entry is None:
                return False
            self.db.delete(entry)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting entry for user {user_id} film {film_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete entry: {str(e)}")

    def list_for_user(self, user_id: str) -> List[UserEntry]:
        """The user's entries with a rating or review, newest first."""
        query = (
            self.db.query(UserEntry)
            .filter(UserEntry.user_id == user_id, _has_content())
            .order_by(UserEntry.updated_at.desc(), UserEntry.id.desc())
        )
        return self._execute_query(query)

    def rated_for_user(self, user_id: str, limit: int) -> List[UserEntry]:
        query = (
            self.db.query(UserEntry)
            .filter(UserEntry.user_id == user_id, UserEntry.rating.isnot(None))
            .order_by(UserEntry.updated_at.desc(), UserEntry.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def top_rated_for_user(self, user_id: str, min_rating: float, limit: int) -> List[UserEntry]:
        """Highly rated entries, best first; used to describe a user's taste."""
        query = (
            self.db.query(UserEntry)
            .filter(UserEntry.user_id == user_id, UserEntry.rating >= min_rating)
            .order_by(UserEntry.rating.desc(), UserEntry.updated_at.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def others_for_film(self, film_id: str, exclude_user_id: Optional[str]) -> List[UserEntry]:
        """Entries of other users for a film, most liked first."""
        query = self.db.query(UserEntry).filter(UserEntry.film_id == film_id, _has_content())
        if exclude_user_id:
            query = query.filter(UserEntry.user_id != exclude_user_id)
        query = query.order_by(UserEntry.like_count.desc(), UserEntry.updated_at.desc())
        return self._execute_query(query)

    def feed_page(
        self,
        user_ids: Sequence[str],
        limit: int,
        cursor_updated_at: Optional[datetime] = None,
        cursor_id: Optional[str] = None,
    ) -> List[UserEntry]:
        """
        One page of entries by the given users, newest first.

        Args:
            user_ids: Authors to include (already filtered for blocks)
            limit: Rows to fetch; callers ask for one extra to detect more pages
            cursor_updated_at: ``updated_at`` of the last row of the previous page
            cursor_id: ``id`` of the last row of the previous page
        """
        if not user_ids:
            return []
        query = self.db.query(UserEntry).filter(UserEntry.user_id.in_(list(user_ids)), _has_content())
        if cursor_updated_at is not None and cursor_id:
            query = query.filter(
                or_(
                    UserEntry.updated_at < cursor_updated_at,
                    and_(UserEntry.updated_at == cursor_updated_at, UserEntry.id < cursor_id),
                )
            )
        query = query.order_by(UserEntry.updated_at.desc(), UserEntry.id.desc()).limit(limit)
        return self._execute_query(query)

    def ratings_by_film(self, user_id: str, film_ids: Sequence[str]) -> Dict[str, Optional[float]]:
        """Map film id -> the user's rating, for the given films."""
        if not film_ids:
            return {}
        try:
            rows = (
                self.db.query(UserEntry.film_id, UserEntry.rating)
                .filter(UserEntry.user_id == user_id, UserEntry.film_id.in_(list(set(film_ids))))
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading ratings of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load ratings: {str(e)}")
        return {film_id: rating for film_id, rating in rows}

    def adjust_like_count(self, entry: UserEntry, delta: int) -> int:
        """Move ``like_count`` by ``delta``, never below zero."""
        try:
            entry.like_count = max(0, (entry.like_count or 0) + delta)
            self.db.flush()
            return entry.like_count
        except SQLAlchemyError as e:
            self.logger.error(f"Error adjusting like count of {entry.id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update like count: {str(e)}")


class EntryLikeRepository(BaseRepository[EntryLike]):
    """Repository for likes on reviews."""

    def __init__(self, db: Session):
        super().__init__(db, EntryLike)
        self.logger = logging.getLogger(__name__)

    def get_like(self, user_id: str, entry_id: str) -> Optional[EntryLike]:
        return self.find_one_by(user_id=user_id, user_entry_id=entry_id)

    def remove(self, like: EntryLike) -> None:
        try:
            self.db.delete(like)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing like {like.id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove like: {str(e)}")

    def liked_entry_ids(self, user_id: str, entry_ids: Sequence[str]) -> Set[str]:
        """Which of ``entry_ids`` the user has liked."""
        if not entry_ids:
            return set()
        try:
            rows = (
                self.db.query(EntryLike.user_entry_id)
                .filter(EntryLike.user_id == user_id, EntryLike.user_entry_id.in_(list(entry_ids)))
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading likes of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load likes: {str(e)}")
        return {row[0] for row in rows}

    def entries_liked_by(self, user_id: str) -> List[UserEntry]:
        """Entries (of any author) that the user has liked."""
        query = (
            self.db.query(UserEntry)
            .join(EntryLike, EntryLike.user_entry_id == UserEntry.id)
            .filter(EntryLike.user_id == user_id)
        )
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading entries liked by {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load liked entries: {str(e)}")
