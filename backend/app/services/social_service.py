"""
Social graph service: user search, public profiles, follow and block.

Blocks hide users from each other in both directions; blocking also drops
any follow edges between the two users.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import USER_RATINGS_LIMIT, USER_SEARCH_LIMIT
from ..core.exceptions import NotFoundException, ValidationException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog.store import CatalogStore, get_catalog
from .privacy_service import PrivacyService

logger = logging.getLogger(__name__)

FOLLOW_LIST_KINDS = ("followers", "following")


class SocialService(BaseService):
    def __init__(self, db: Session, store: Optional[CatalogStore] = None):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.follow_repository = RepositoryFactory.create_follow_repository(db)
        self.block_repository = RepositoryFactory.create_block_repository(db)
        self.entry_repository = RepositoryFactory.create_user_entry_repository(db)
        self.privacy_service = PrivacyService(db)
        self._store = store

    @property
    def store(self) -> CatalogStore:
        if self._store is None:
            self._store = get_catalog()
        return self._store

    def _get_visible_user(self, viewer_id: Optional[str], user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")
        if viewer_id and self.block_repository.is_blocking(user_id, viewer_id):
            raise NotFoundException("User not found", code="USER_NOT_FOUND")
        return user

    # ── Search and profiles ───────────────────────────────────────

    @BaseService.measure_operation("search_users")
    def search_users(self, viewer_id: str, query: Optional[str]) -> List[Dict[str, Any]]:
        """Nickname substring search, excluding the viewer and blocked users."""
        text = (query or "").strip()
        if not text:
            return []
        hidden = self.block_repository.hidden_user_ids(viewer_id)
        users = [
            u
            for u in self.user_repository.search_by_nickname(text, viewer_id, USER_SEARCH_LIMIT + len(hidden))
            if u.id not in hidden
        ][:USER_SEARCH_LIMIT]
        following = self.follow_repository.following_ids(viewer_id, among=[u.id for u in users])
        return [{"id": u.id, "nickname": u.nickname, "is_following": u.id in following} for u in users]

    @BaseService.measure_operation("get_user_profile")
    def get_user_profile(self, viewer_id: Optional[str], user_id: str) -> Dict[str, Any]:
        user = self._get_visible_user(viewer_id, user_id)
        is_following = bool(viewer_id) and self.follow_repository.is_following(viewer_id, user.id)
        is_blocking = bool(viewer_id) and self.block_repository.is_blocking(viewer_id, user.id)
        return {
            "id": user.id,
            "nickname": user.nickname,
            "bio": user.bio,
            "letterboxd_id": user.letterboxd_id,
            "follower_count": self.follow_repository.count_followers(user.id),
            "following_count": self.follow_repository.count_following(user.id),
            "is_following": is_following,
            "is_blocking": is_blocking,
            "is_me": viewer_id == user.id,
        }

    @BaseService.measure_operation("get_user_ratings")
    def get_user_ratings(self, viewer_id: Optional[str], user_id: str) -> List[Dict[str, Any]]:
        """The user's most recent ratings, if their privacy settings allow the viewer."""
        user = self._get_visible_user(viewer_id, user_id)
        if viewer_id and self.block_repository.is_blocking(viewer_id, user.id):
            return []
        visibility = self.privacy_service.visibility_for([user.id], viewer_id)[user.id]
        if not visibility.rating:
            return []

        items = []
        for entry in self.entry_repository.rated_for_user(user.id, USER_RATINGS_LIMIT):
            film = self.store.film(entry.film_id)
            items.append(
                {
                    "id": entry.id,
                    "film_id": entry.film_id,
                    "film_title": film.display_title if film else entry.film_id,
                    "rating": float(entry.rating) if entry.rating is not None else None,
                    "short_review": entry.short_review if visibility.review and entry.has_review else None,
                    "updated_at": entry.updated_at,
                }
            )
        return items

    # ── Follow graph ──────────────────────────────────────────────

    @BaseService.measure_operation("get_follow_list")
    def get_follow_list(self, viewer_id: Optional[str], user_id: str, kind: str) -> List[Dict[str, Any]]:
        if kind not in FOLLOW_LIST_KINDS:
            raise ValidationException("kind must be followers or following", code="INVALID_KIND")
        user = self._get_visible_user(viewer_id, user_id)

        if kind == "followers":
            users = self.follow_repository.get_followers(user.id)
        else:
            users = self.follow_repository.get_following(user.id)

        following = set()
        if viewer_id:
            hidden = self.block_repository.hidden_user_ids(viewer_id)
            users = [u for u in users if u.id not in hidden]
            following = self.follow_repository.following_ids(viewer_id, among=[u.id for u in users])

        return [
            {
                "id": u.id,
                "nickname": u.nickname,
                "is_following": u.id in following,
                "is_me": u.id == viewer_id,
            }
            for u in users
        ]

    @BaseService.measure_operation("toggle_follow")
    def toggle_follow(self, viewer_id: str, target_id: str) -> Dict[str, bool]:
        """
        Follow or unfollow ``target_id``.

        Raises:
            ValidationException: following yourself, or a block exists between the users
            NotFoundException: unknown target
        """
        if viewer_id == target_id:
            raise ValidationException("Cannot follow yourself", code="SELF_FOLLOW")
        self._get_visible_user(viewer_id, target_id)

        with self.transaction():
            if self.follow_repository.is_following(viewer_id, target_id):
                self.follow_repository.unfollow(viewer_id, target_id)
                following = False
            else:
                if self.block_repository.is_blocking(viewer_id, target_id):
                    raise ValidationException("Unblock this user before following", code="BLOCKED")
                self.follow_repository.follow(viewer_id, target_id)
                following = True

        self.log_operation("toggle_follow", viewer_id=viewer_id, target_id=target_id, following=following)
        return {"following": following}

    # ── Blocks ────────────────────────────────────────────────────

    @BaseService.measure_operation("toggle_block")
    def toggle_block(self, viewer_id: str, target_id: str) -> Dict[str, bool]:
        """Block or unblock; blocking removes follow edges both ways."""
        if viewer_id == target_id:
            raise ValidationException("Cannot block yourself", code="SELF_BLOCK")
        target = self.user_repository.get_by_id(target_id)
        if target is None:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")

        with self.transaction():
            if self.block_repository.is_blocking(viewer_id, target_id):
                self.block_repository.unblock(viewer_id, target_id)
                blocking = False
            else:
                self.block_repository.block(viewer_id, target_id)
                self.follow_repository.remove_between(viewer_id, target_id)
                blocking = True

        self.log_operation("toggle_block", viewer_id=viewer_id, target_id=target_id, blocking=blocking)
        return {"blocking": blocking}

    @BaseService.measure_operation("get_blocked_users")
    def get_blocked_users(self, viewer_id: str) -> List[Dict[str, Any]]:
        return [{"id": u.id, "nickname": u.nickname} for u in self.block_repository.get_blocked_users(viewer_id)]
