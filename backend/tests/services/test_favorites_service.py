import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.services.favorites_service import FavoriteScreeningService


@pytest.fixture
def service(db):
    return FavoriteScreeningService(db)


def test_set_and_get_favorites(service, test_user):
    saved = service.set_favorite(test_user.id, "scr_a1")
    assert saved["screening_id"] == "scr_a1"
    assert saved["priority"] is None
    assert "id" in saved

    service.set_favorite(test_user.id, "scr_b1", updates={"priority": 2, "sort_order": 1})

    found = service.get_favorites(test_user.id, ["scr_a1", "scr_b1", "scr_c1", " "])
    assert {f["screening_id"]: f["priority"] for f in found} == {"scr_a1": None, "scr_b1": 2}
    assert all("id" not in f for f in found)


def test_get_favorites_without_ids(service, test_user):
    service.set_favorite(test_user.id, "scr_a1")
    assert service.get_favorites(test_user.id, []) == []
    assert service.get_favorites(test_user.id, None) == []


def test_refavorite_keeps_priority(service, test_user):
    service.set_favorite(test_user.id, "scr_a1", updates={"priority": 1})
    again = service.set_favorite(test_user.id, "scr_a1")
    assert again["priority"] == 1


def test_unknown_update_fields_are_ignored(service, test_user):
    saved = service.set_favorite(test_user.id, "scr_a1", updates={"user_id": "someone-else", "sort_order": 3})
    assert saved["sort_order"] == 3
    assert service.list_favorites(test_user.id)[0]["screening_id"] == "scr_a1"


def test_unfavorite(service, test_user):
    service.set_favorite(test_user.id, "scr_a1")

    assert service.set_favorite(test_user.id, "scr_a1", favorite=False) is None
    assert service.list_favorites(test_user.id) == []
    # removing again is a no-op
    assert service.set_favorite(test_user.id, "scr_a1", favorite=False) is None


def test_favorites_are_per_user(service, test_user, other_user):
    service.set_favorite(test_user.id, "scr_a1")
    assert service.list_favorites(other_user.id) == []


def test_screening_id_required(service, test_user):
    with pytest.raises(ValidationException) as exc_info:
        service.set_favorite(test_user.id, "")
    assert exc_info.value.code == "SCREENING_ID_REQUIRED"


def test_cycle_priority(service, test_user):
    service.set_favorite(test_user.id, "scr_a1")

    priorities = [service.cycle_priority(test_user.id, "scr_a1")["priority"] for _ in range(4)]

    assert priorities == [1, 2, 0, 1]


def test_cycle_priority_requires_favorite(service, test_user):
    with pytest.raises(NotFoundException) as exc_info:
        service.cycle_priority(test_user.id, "scr_a1")
    assert exc_info.value.code == "FAVORITE_NOT_FOUND"
