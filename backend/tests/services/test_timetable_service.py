import pytest

from app.services.favorites_service import FavoriteScreeningService
from app.services.timetable_service import TimetableService

JIFF = "edition_jiff_2025"
BIFF = "edition_biff_2025"


@pytest.fixture
def favorite(db, test_user):
    favorites = FavoriteScreeningService(db)

    def _favorite(*screening_ids, **updates):
        for screening_id in screening_ids:
            favorites.set_favorite(test_user.id, screening_id, updates=updates or None)

    return _favorite


@pytest.fixture
def service(db, catalog):
    return TimetableService(db, store=catalog)


def test_empty_timetable(service, test_user):
    result = service.build(test_user.id)

    assert result["editions"] == []
    assert result["current_edition"] is None
    assert result["edition_label"] is None
    assert result["dates"] == []
    assert result["rows"] == []
    assert result["groups"] == []
    assert result["day_start_min"] == 8 * 60
    assert result["day_end_min"] == 27 * 60


def test_defaults_to_first_edition_and_day(service, favorite, test_user):
    favorite("scr_a1", "scr_b1", "scr_c1", "scr_b2", "scr_e1")

    result = service.build(test_user.id)

    assert [e["id"] for e in result["editions"]] == [JIFF, BIFF]
    assert result["current_edition"] == JIFF
    assert result["edition_label"] == "JIFF 2025"
    assert result["dates"] == [
        {"date": "2025-05-01", "label": "5월 1일(목)", "is_weekend": False},
        {"date": "2025-05-02", "label": "5월 2일(금)", "is_weekend": False},
    ]
    assert result["current_date"] == "2025-05-01"
    assert [row["id"] for row in result["rows"]] == ["scr_a1", "scr_b1", "scr_c1"]
    assert result["groups"] == [
        {"size_index": 1, "start_min": 600, "screening_ids": ["scr_a1", "scr_b1"]},
        {"size_index": 0, "start_min": 780, "screening_ids": ["scr_c1"]},
    ]


def test_row_labels(service, favorite, test_user):
    favorite("scr_a1", "scr_c1")

    rows = {row["id"]: row for row in service.build(test_user.id)["rows"]}

    assert rows["scr_a1"]["start_label"] == "10:00"
    assert rows["scr_a1"]["end_label"] == "11:40"
    assert rows["scr_a1"]["is_end_estimated"] is False
    assert rows["scr_a1"]["film_title"] == "봄의 정원"
    assert rows["scr_c1"]["end_label"] == "13:20"
    assert rows["scr_c1"]["is_end_estimated"] is True


def test_after_midnight_show_sits_at_the_end_of_its_day(service, favorite, test_user):
    favorite("scr_b2", "scr_a2")

    result = service.build(test_user.id, edition=JIFF, date="2025-05-02")

    rows = {row["id"]: row for row in result["rows"]}
    assert [row["id"] for row in result["rows"]] == ["scr_a2", "scr_b2"]
    assert rows["scr_b2"]["start_min"] == 24 * 60 + 30
    assert rows["scr_b2"]["end_min"] == 26 * 60
    # no endsAt and a 100 minute runtime
    assert rows["scr_a2"]["end_min"] == 14 * 60 + 100


def test_explicit_edition_and_unknown_date(service, favorite, test_user):
    favorite("scr_a1", "scr_e1", "scr_a_biff")

    result = service.build(test_user.id, edition=BIFF, date="2025-12-25")

    assert result["current_edition"] == BIFF
    assert result["current_date"] == "2025-10-03"
    assert [row["id"] for row in result["rows"]] == ["scr_e1"]


def test_priority_and_sort_order_are_carried(service, favorite, test_user):
    favorite("scr_a1", priority=2, sort_order=1)

    row = service.build(test_user.id)["rows"][0]

    assert row["priority"] == 2
    assert row["sort_order"] == 1


def test_unknown_screenings_are_skipped(service, favorite, test_user):
    favorite("scr_gone", "scr_a1")
    assert [row["id"] for row in service.build(test_user.id)["rows"]] == ["scr_a1"]
