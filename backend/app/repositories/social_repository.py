"""
Social graph repository: follow and block edges.

All writes flush without committing; the calling service owns the transaction.
"""

import logging
from typing import List, Optional, Sequence, Set

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.social import Block, Follow
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class FollowRepository(BaseRepository[Follow]):
    """Repository for follow edges."""

    def __init__(self, db: Session):
        super().__init__(db, Follow)
        self.logger = logging.getLogger(__name__)

    def get_edge(self, follower_id: str, following_id: str) -> Optional[Follow]:
        try:
            return (
                self.db.query(Follow)
                .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading follow {follower_id}->{following_id}: {str(e)}")
            raise RepositoryException(f"Failed to load follow edge: {str(e)}")

    def is_following(self, follower_id: str, following_id: str) -> bool:
        return self.get_edge(follower_id, following_id) is not None

    def follow(self, follower_id: str, following_id: str) -> Follow:
        edge = self.get_edge(follower_id, following_id)
        if edge:
            return edge
        return self.create(follower_id=follower_id, following_id=following_id)

    def unfollow(self, follower_id: str, following_id: str) -> bool:
        try:
            deleted = (
                self.db.query(Follow)
                .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return deleted > 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing follow {follower_id}->{following_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove follow edge: {str(e)}")

    def remove_between(self, user_a: str, user_b: str) -> int:
        """Remove follow edges in both directions between two users."""
        try:
            deleted = (
                self.db.query(Follow)
                .filter(
                    or_(
                        and_(Follow.follower_id == user_a, Follow.following_id == user_b),
                        and_(Follow.follower_id == user_b, Follow.following_id == user_a),
                    )
                )
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return deleted
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing follows between {user_a} and {user_b}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove follow edges: {str(e)}")

    def count_followers(self, user_id: str) -> int:
        return self.count(following_id=user_id)

    def count_following(self, user_id: str) -> int:
        return self.count(follower_id=user_id)

    def get_followers(self, user_id: str) -> List[User]:
        """Users following ``user_id``, newest edge first."""
        try:
            return (
                self.db.query(User)
                .join(Follow, Follow.follower_id == User.id)
                .filter(Follow.following_id == user_id)
                .order_by(Follow.created_at.desc(), User.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading followers of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load followers: {str(e)}")

    def get_following(self, user_id: str) -> List[User]:
        """Users that ``user_id`` follows, newest edge first."""
        try:
            return (
                self.db.query(User)
                .join(Follow, Follow.following_id == User.id)
                .filter(Follow.follower_id == user_id)
                .order_by(Follow.created_at.desc(), User.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading following of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load following: {str(e)}")

    def following_ids(self, follower_id: str, among: Optional[Sequence[str]] = None) -> Set[str]:
        """Ids the follower follows, optionally restricted to ``among``."""
        try:
            query = self.db.query(Follow.following_id).filter(Follow.follower_id == follower_id)
            if among is not None:
                if not among:
                    return set()
                query = query.filter(Follow.following_id.in_(list(among)))
            return {row[0] for row in query.all()}
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading following ids of {follower_id}: {str(e)}")
            raise RepositoryException(f"Failed to load following ids: {str(e)}")

    def follower_ids(self, user_id: str, among: Optional[Sequence[str]] = None) -> Set[str]:
        """Ids of users following ``user_id``, optionally restricted to ``among``."""
        try:
            query = self.db.query(Follow.follower_id).filter(Follow.following_id == user_id)
            if among is not None:
                if not among:
                    return set()
                query = query.filter(Follow.follower_id.in_(list(among)))
            return {row[0] for row in query.all()}
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading follower ids of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load follower ids: {str(e)}")


class BlockRepository(BaseRepository[Block]):
    """Repository for block edges."""

    def __init__(self, db: Session):
        super().__init__(db, Block)
        self.logger = logging.getLogger(__name__)

    def is_blocking(self, blocker_id: str, blocked_id: str) -> bool:
        return self.exists(blocker_id=blocker_id, blocked_id=blocked_id)

    def block(self, blocker_id: str, blocked_id: str) -> Block:
        existing = self.find_one_by(blocker_id=blocker_id, blocked_id=blocked_id)
        if existing:
            return existing
        return self.create(blocker_id=blocker_id, blocked_id=blocked_id)

    def unblock(self, blocker_id: str, blocked_id: str) -> bool:
        try:
            deleted = (
                self.db.query(Block)
                .filter(Block.blocker_id == blocker_id, Block.blocked_id == blocked_id)
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return deleted > 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing block {blocker_id}->{blocked_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove block: {str(e)}")

    def get_blocked_users(self, blocker_id: str) -> List[User]:
        try:
            return (
                self.db.query(User)
                .join(Block, Block.blocked_id == User.id)
                .filter(Block.blocker_id == blocker_id)
                .order_by(Block.created_at.desc(), User.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading blocked users of {blocker_id}: {str(e)}")
            raise RepositoryException(f"Failed to load blocked users: {str(e)}")

    def hidden_user_ids(self, user_id: str) -> Set[str]:
        """Users hidden from ``user_id``: blocked by them, or who blocked them."""
        try:
            rows = (
                self.db.query(Block.blocker_id, Block.blocked_id)
                .filter(or_(Block.blocker_id == user_id, Block.blocked_id == user_id))
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading block edges of {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load block edges: {str(e)}")
        hidden: Set[str] = set()
        for blocker_id, blocked_id in rows:
            hidden.add(blocked_id if blocker_id == user_id else blocker_id)
        return hidden
