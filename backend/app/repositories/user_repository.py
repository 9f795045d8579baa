# backend/app/repositories/user_repository.py
"""
User Repository for the festival archive.

Handles User lookups by id, email and nickname, plus nickname search for
the people finder.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (already normalized) email."""
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email {email}: {str(e)}")
            raise RepositoryException(f"Failed to get user by email: {str(e)}")

    def nickname_taken(self, nickname: str, exclude_user_id: Optional[str] = None) -> bool:
        """Check whether another user already holds the nickname."""
        try:
            query = self.db.query(User.id).filter(User.nickname == nickname)
            if exclude_user_id:
                query = query.filter(User.id != exclude_user_id)
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking nickname {nickname}: {str(e)}")
            raise RepositoryException(f"Failed to check nickname: {str(e)}")

    def search_by_nickname(self, query_text: str, exclude_user_id: str, limit: int) -> List[User]:
        """Case-insensitive substring search on nickname, ordered by nickname."""
        try:
            pattern = f"%{query_text.lower()}%"
            return (
                self.db.query(User)
                .filter(
                    User.nickname.isnot(None),
                    func.lower(User.nickname).like(pattern),
                    User.id != exclude_user_id,
                )
                .order_by(User.nickname.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error searching users for '{query_text}': {str(e)}")
            raise RepositoryException(f"Failed to search users: {str(e)}")

    def get_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        if not user_ids:
            return []
        try:
            return self.db.query(User).filter(User.id.in_(list(user_ids))).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading users by ids: {str(e)}")
            raise RepositoryException(f"Failed to load users: {str(e)}")
