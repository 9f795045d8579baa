from datetime import datetime, timezone

import pytest

from app.core.exceptions import BusinessRuleException, NotFoundException
from app.models.user_entry import UserEntry
from app.services.privacy_service import PrivacyService
from app.services.review_service import ReviewService
from app.services.social_service import SocialService
from app.services.user_entry_service import UserEntryService


@pytest.fixture
def service(db, catalog):
    return ReviewService(db, store=catalog)


def _entry(db, user, film_id, rating=None, review="", updated_at=None) -> str:
    data = UserEntryService(db).upsert_entry(user.id, film_id, rating=rating, short_review=review)
    if updated_at is not None:
        entry = db.get(UserEntry, data["id"])
        entry.updated_at = updated_at
        db.commit()
    return data["id"]


def _public(db, user):
    PrivacyService(db).update_settings(user.id, rating_visibility="public", review_visibility="public")


def _at(hour, minute=0):
    return datetime(2025, 5, 1, hour, minute, tzinfo=timezone.utc)


class TestToggleLike:
    def test_like_and_unlike(self, db, service, test_user, other_user):
        entry_id = _entry(db, other_user, "film_a", rating=4.5, review="인생 영화")

        assert service.toggle_like(test_user.id, entry_id) == {"liked": True, "like_count": 1}
        assert db.get(UserEntry, entry_id).like_count == 1

        assert service.toggle_like(test_user.id, entry_id) == {"liked": False, "like_count": 0}

    def test_likes_from_several_users(self, db, service, test_user, other_user, third_user):
        entry_id = _entry(db, other_user, "film_a", review="인생 영화")
        service.toggle_like(test_user.id, entry_id)
        assert service.toggle_like(third_user.id, entry_id)["like_count"] == 2

    def test_rating_only_entry_cannot_be_liked(self, db, service, test_user, other_user):
        entry_id = _entry(db, other_user, "film_a", rating=4.0, review="  ")
        with pytest.raises(BusinessRuleException) as exc_info:
            service.toggle_like(test_user.id, entry_id)
        assert exc_info.value.code == "REVIEW_REQUIRED"
        assert exc_info.value.status_code == 422

    def test_unknown_entry(self, service, test_user):
        with pytest.raises(NotFoundException) as exc_info:
            service.toggle_like(test_user.id, "missing")
        assert exc_info.value.code == "ENTRY_NOT_FOUND"

    @pytest.mark.parametrize("blocker", ["viewer", "author"])
    def test_blocked_author_is_hidden(self, db, service, test_user, other_user, blocker):
        entry_id = _entry(db, other_user, "film_a", review="인생 영화")
        if blocker == "viewer":
            SocialService(db).toggle_block(test_user.id, other_user.id)
        else:
            SocialService(db).toggle_block(other_user.id, test_user.id)

        with pytest.raises(NotFoundException):
            service.toggle_like(test_user.id, entry_id)


class TestSocialReviews:
    def test_private_entries_are_hidden(self, db, service, test_user, other_user):
        _entry(db, other_user, "film_a", rating=4.5, review="인생 영화")
        assert service.social_reviews(test_user.id, "film_a") == []

    def test_visible_fields_follow_privacy(self, db, service, test_user, other_user, third_user):
        PrivacyService(db).update_settings(other_user.id, review_visibility="public")
        _public(db, third_user)
        critic_id = _entry(db, other_user, "film_a", rating=4.5, review="인생 영화")
        curator_id = _entry(db, third_user, "film_a", rating=3.0, review="무난")
        _entry(db, test_user, "film_a", rating=5.0, review="내 리뷰")
        service.toggle_like(test_user.id, curator_id)

        items = service.social_reviews(test_user.id, "film_a")

        assert [item["id"] for item in items] == [curator_id, critic_id]
        curator, critic = items
        assert curator["nickname"] == "curator"
        assert curator["rating"] == 3.0
        assert curator["is_liked"] is True
        assert curator["like_count"] == 1
        assert critic["rating"] is None
        assert critic["short_review"] == "인생 영화"
        assert critic["is_liked"] is False

    def test_blocked_users_are_excluded(self, db, service, test_user, other_user):
        _public(db, other_user)
        _entry(db, other_user, "film_a", review="인생 영화")
        SocialService(db).toggle_block(other_user.id, test_user.id)

        assert service.social_reviews(test_user.id, "film_a") == []

    def test_anonymous_viewer_sees_public_entries(self, db, service, other_user):
        _public(db, other_user)
        _entry(db, other_user, "film_a", review="인생 영화")

        items = service.social_reviews(None, "film_a")

        assert len(items) == 1
        assert items[0]["is_liked"] is False


class TestFeed:
    def test_no_follows_means_empty_feed(self, service, test_user):
        assert service.get_feed(test_user.id) == {"items": [], "next_cursor": None}

    def test_pages_skip_hidden_entries(self, db, service, test_user, other_user, third_user):
        social = SocialService(db)
        social.toggle_follow(test_user.id, other_user.id)
        social.toggle_follow(test_user.id, third_user.id)
        _public(db, other_user)

        newest = _entry(db, other_user, "film_a", rating=4.5, review="인생 영화", updated_at=_at(10))
        _entry(db, third_user, "film_d", rating=2.0, updated_at=_at(9, 30))
        middle = _entry(db, other_user, "film_b", rating=3.5, updated_at=_at(9))
        oldest = _entry(db, other_user, "film_c", review="짧고 좋다", updated_at=_at(8))
        _entry(db, test_user, "film_a", rating=3.0, updated_at=_at(7))

        first = service.get_feed(test_user.id, page_size=2)

        assert [item["id"] for item in first["items"]] == [newest, middle]
        top = first["items"][0]
        assert top["nickname"] == "critic"
        assert top["film_title"] == "봄의 정원"
        assert top["my_rating"] == 3.0
        assert first["items"][1]["my_rating"] is None
        assert first["next_cursor"]["id"] == middle

        second = service.get_feed(
            test_user.id,
            cursor_updated_at=first["next_cursor"]["updated_at"],
            cursor_id=first["next_cursor"]["id"],
            page_size=2,
        )

        assert [item["id"] for item in second["items"]] == [oldest]
        assert second["next_cursor"] is None

    def test_unfollowed_users_leave_the_feed(self, db, service, test_user, other_user):
        social = SocialService(db)
        social.toggle_follow(test_user.id, other_user.id)
        _public(db, other_user)
        _entry(db, other_user, "film_a", rating=4.0)
        assert len(service.get_feed(test_user.id)["items"]) == 1

        social.toggle_follow(test_user.id, other_user.id)
        assert service.get_feed(test_user.id)["items"] == []
