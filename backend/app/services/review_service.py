# backend/app/services/review_service.py
"""
ReviewService: the social side of film entries.

Implements:
- Liking other users' reviews (like rows and the denormalized counter move together)
- Reviews of a film by other users, filtered by privacy and blocks
- The feed of followed users' entries with keyset pagination
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.constants import FEED_PAGE_SIZE
from ..core.exceptions import BusinessRuleException, NotFoundException
from ..models.user_entry import UserEntry
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog.store import CatalogStore, get_catalog
from .privacy_service import PrivacyService, Visibility


class ReviewService(BaseService):
    """Likes, social reviews and the feed."""

    def __init__(self, db: Session, store: Optional[CatalogStore] = None) -> None:
        super().__init__(db)
        self.entry_repository = RepositoryFactory.create_user_entry_repository(db)
        self.like_repository = RepositoryFactory.create_entry_like_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.follow_repository = RepositoryFactory.create_follow_repository(db)
        self.block_repository = RepositoryFactory.create_block_repository(db)
        self.privacy_service = PrivacyService(db)
        self._store = store

    @property
    def store(self) -> CatalogStore:
        if self._store is None:
            self._store = get_catalog()
        return self._store

    # ── Likes ─────────────────────────────────────────────────────

    @BaseService.measure_operation("toggle_like")
    def toggle_like(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        """
        Like or unlike a review.

        Raises:
            NotFoundException: unknown entry, or its author is blocked either way
            BusinessRuleException: the entry has no review text
        """
        entry = self.entry_repository.get_by_id(entry_id)
        if entry is None or entry.user_id in self.block_repository.hidden_user_ids(user_id):
            raise NotFoundException("Entry not found", code="ENTRY_NOT_FOUND")
        if not entry.has_review:
            raise BusinessRuleException("Cannot like an entry without a review", code="REVIEW_REQUIRED")

        with self.transaction():
            existing = self.like_repository.get_like(user_id, entry_id)
            if existing:
                self.like_repository.remove(existing)
                like_count = self.entry_repository.adjust_like_count(entry, -1)
                liked = False
            else:
                self.like_repository.create(user_id=user_id, user_entry_id=entry_id)
                like_count = self.entry_repository.adjust_like_count(entry, 1)
                liked = True

        self.log_operation("toggle_like", user_id=user_id, entry_id=entry_id, liked=liked)
        return {"liked": liked, "like_count": like_count}

    # ── Shared helpers ────────────────────────────────────────────

    @staticmethod
    def _visible_item(entry: UserEntry, visibility: Visibility) -> Optional[Dict[str, Any]]:
        """Entry fields the viewer may see; None when nothing visible remains."""
        rating = float(entry.rating) if visibility.rating and entry.rating is not None else None
        review = entry.short_review if visibility.review and entry.has_review else None
        if rating is None and review is None:
            return None
        return {
            "id": entry.id,
            "user_id": entry.user_id,
            "film_id": entry.film_id,
            "rating": rating,
            "short_review": review,
            "like_count": entry.like_count or 0,
            "updated_at": entry.updated_at,
        }

    def _nicknames(self, user_ids: List[str]) -> Dict[str, Optional[str]]:
        return {u.id: u.nickname for u in self.user_repository.get_by_ids(list(set(user_ids)))}

    # ── Social reviews ────────────────────────────────────────────

    @BaseService.measure_operation("social_reviews")
    def social_reviews(self, viewer_id: Optional[str], film_id: str) -> List[Dict[str, Any]]:
        """Other users' visible entries for a film, most liked first."""
        entries = self.entry_repository.others_for_film(film_id, exclude_user_id=viewer_id)
        if viewer_id:
            hidden = self.block_repository.hidden_user_ids(viewer_id)
            entries = [e for e in entries if e.user_id not in hidden]
        if not entries:
            return []

        visibility = self.privacy_service.visibility_for([e.user_id for e in entries], viewer_id)
        items = []
        for entry in entries:
            item = self._visible_item(entry, visibility[entry.user_id])
            if item is not None:
                items.append(item)

        nicknames = self._nicknames([item["user_id"] for item in items])
        liked = (
            self.like_repository.liked_entry_ids(viewer_id, [item["id"] for item in items])
            if viewer_id
            else set()
        )
        for item in items:
            item["nickname"] = nicknames.get(item["user_id"])
            item["is_liked"] = item["id"] in liked
        return items

    # ── Feed ──────────────────────────────────────────────────────

    @BaseService.measure_operation("get_feed")
    def get_feed(
        self,
        viewer_id: str,
        cursor_updated_at: Optional[datetime] = None,
        cursor_id: Optional[str] = None,
        page_size: int = FEED_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        One page of entries from followed users, newest first.

        Returns:
            ``{items, next_cursor}``; ``next_cursor`` is ``{updated_at, id}``
            of the last item, or None on the last page
        """
        hidden = self.block_repository.hidden_user_ids(viewer_id)
        authors = sorted(self.follow_repository.following_ids(viewer_id) - hidden)
        if not authors:
            return {"items": [], "next_cursor": None}

        visibility = self.privacy_service.visibility_for(authors, viewer_id)
        collected: List[Tuple[UserEntry, Dict[str, Any]]] = []
        cursor: Tuple[Optional[datetime], Optional[str]] = (cursor_updated_at, cursor_id)

        # rows hidden by privacy are skipped, so keep reading until the page fills
        while len(collected) <= page_size:
            batch = self.entry_repository.feed_page(
                authors, limit=page_size + 1, cursor_updated_at=cursor[0], cursor_id=cursor[1]
            )
            for entry in batch:
                cursor = (entry.updated_at, entry.id)
                item = self._visible_item(entry, visibility[entry.user_id])
                if item is not None:
                    collected.append((entry, item))
            if len(batch) < page_size + 1:
                break

        has_more = len(collected) > page_size
        page = collected[:page_size]
        items = [item for _, item in page]

        nicknames = self._nicknames([item["user_id"] for item in items])
        liked = self.like_repository.liked_entry_ids(viewer_id, [item["id"] for item in items])
        my_ratings = self.entry_repository.ratings_by_film(viewer_id, [item["film_id"] for item in items])
        for item in items:
            film = self.store.film(item["film_id"])
            item["nickname"] = nicknames.get(item["user_id"])
            item["film_title"] = film.display_title if film else item["film_id"]
            item["is_liked"] = item["id"] in liked
            my_rating = my_ratings.get(item["film_id"])
            item["my_rating"] = float(my_rating) if my_rating is not None else None

        next_cursor = None
        if has_more and page:
            last = page[-1][0]
            next_cursor = {"updated_at": last.updated_at, "id": last.id}
        return {"items": items, "next_cursor": next_cursor}
