import pytest

from app.core.exceptions import ValidationException
from app.services.user_entry_service import UserEntryService, normalize_rating, normalize_review


@pytest.mark.parametrize(
    "raw,expected",
    [(None, None), (0, None), (-1, None), (3.14, 3.1), (4.96, 5.0), (5, 5.0)],
)
def test_normalize_rating(raw, expected):
    assert normalize_rating(raw) == expected


def test_normalize_rating_rejects_above_max():
    with pytest.raises(ValidationException) as exc_info:
        normalize_rating(5.5)
    assert exc_info.value.code == "INVALID_RATING"


def test_normalize_review_truncates():
    assert normalize_review(None) == ""
    assert normalize_review("x" * 250) == "x" * 200


class TestUserEntryService:
    @pytest.fixture
    def service(self, db):
        return UserEntryService(db)

    def test_upsert_creates_then_updates(self, service, test_user):
        created = service.upsert_entry(test_user.id, "film_a", rating=4.24, short_review="좋았다")
        assert created["rating"] == 4.2
        assert created["short_review"] == "좋았다"
        assert created["like_count"] == 0

        updated = service.upsert_entry(test_user.id, "film_a", rating=0, short_review="다시 보니 별로")

        assert updated["id"] == created["id"]
        assert updated["rating"] is None
        assert updated["short_review"] == "다시 보니 별로"
        assert service.get_entry(test_user.id, "film_a")["short_review"] == "다시 보니 별로"

    def test_get_entry_missing_returns_none(self, service, test_user):
        assert service.get_entry(test_user.id, "film_a") is None

    @pytest.mark.parametrize("film_id", [None, "", "   "])
    def test_film_id_required(self, service, test_user, film_id):
        with pytest.raises(ValidationException) as exc_info:
            service.get_entry(test_user.id, film_id)
        assert exc_info.value.code == "FILM_ID_REQUIRED"

    def test_delete_entry(self, service, test_user):
        service.upsert_entry(test_user.id, "film_a", rating=3)

        assert service.delete_entry(test_user.id, "film_a") is True
        assert service.delete_entry(test_user.id, "film_a") is False
        assert service.get_entry(test_user.id, "film_a") is None

    def test_list_skips_empty_entries(self, service, test_user, other_user):
        service.upsert_entry(test_user.id, "film_a", rating=3.5)
        service.upsert_entry(test_user.id, "film_b", short_review="밤이 길다")
        service.upsert_entry(test_user.id, "film_c", rating=0, short_review="   ")
        service.upsert_entry(other_user.id, "film_d", rating=5)

        entries = service.list_entries(test_user.id)

        assert [e["film_id"] for e in entries] == ["film_b", "film_a"]
