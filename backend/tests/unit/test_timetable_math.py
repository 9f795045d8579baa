import pytest

from app.services.catalog.timetable import (
    DAY_END_MIN,
    DAY_START_MIN,
    SlotScreening,
    abs_minutes_to_hm,
    count_screenings_for_slot,
    get_next_priority,
    get_time_range_info,
    group_by_overlap,
    hm_to_minutes,
    idx_from_size,
    iso_to_abs_minutes,
    step_offset,
)


def _row(row_id, start, end):
    return {"id": row_id, "start_min": start, "end_min": end}


class TestGroupByOverlap:
    def test_empty(self):
        assert group_by_overlap([]) == []

    def test_touching_rows_do_not_overlap(self):
        groups = group_by_overlap([_row("a", 600, 700), _row("b", 700, 800)])
        assert [[r["id"] for r in g] for g in groups] == [["a"], ["b"]]

    def test_chain_extends_group_end(self):
        rows = [_row("c", 750, 800), _row("a", 600, 700), _row("b", 690, 760)]
        groups = group_by_overlap(rows)
        assert [[r["id"] for r in g] for g in groups] == [["a", "b", "c"]]

    def test_end_before_start_wraps_past_midnight(self):
        # 23:30 -> 01:00 ends the next day, so a 23:45 start overlaps it
        groups = group_by_overlap([_row("late", 1410, 60), _row("later", 1425, 1500)])
        assert len(groups) == 1

    def test_accepts_objects(self):
        class Row:
            def __init__(self, start, end):
                self.start_min = start
                self.end_min = end

        groups = group_by_overlap([Row(600, 650), Row(640, 700), Row(900, 950)])
        assert [len(g) for g in groups] == [2, 1]


@pytest.mark.parametrize("size,expected", [(1, 0), (2, 1), (4, 3), (5, 4), (9, 4)])
def test_idx_from_size(size, expected):
    assert idx_from_size(size) == expected


def test_step_offset_rounds_forward_and_truncates_backward():
    assert step_offset(14, 10) == 1
    assert step_offset(15, 10) == 2
    assert step_offset(-14, 10) == -1
    assert step_offset(-5, 10) == 0


def test_absolute_minutes_roll_early_morning_into_previous_day():
    assert DAY_START_MIN == 480
    assert DAY_END_MIN == 27 * 60
    assert iso_to_abs_minutes("2025-05-01T10:00:00+09:00") == 600
    assert iso_to_abs_minutes("2025-05-02T01:30:00+09:00") == 1530
    assert iso_to_abs_minutes("2025-05-02T08:00:00+09:00") == 480
    assert abs_minutes_to_hm(1530) == "01:30"


def test_hm_to_minutes_accepts_clock_and_iso():
    assert hm_to_minutes("13:05") == 785
    assert hm_to_minutes("2025-05-01T13:05:00") == 785
    assert hm_to_minutes("bad") is None
    assert hm_to_minutes(None) is None


def test_count_screenings_for_slot_requires_full_fit():
    shows = [SlotScreening(600, 700), SlotScreening(650, 760), SlotScreening(800, 900)]
    assert count_screenings_for_slot(shows, 600, 760) == 2
    assert count_screenings_for_slot(shows, 610, 760) == 1


class TestTimeRangeInfo:
    def test_uses_ends_at_when_known(self):
        info = get_time_range_info(
            {"start_min": 600, "time": "10:00", "ends_at": "2025-05-01T11:40:00+09:00", "runtime_min": 90}
        )
        assert (info.start_label, info.end_label, info.is_end_estimated) == ("10:00", "11:40", False)

    def test_estimates_from_runtime(self):
        info = get_time_range_info({"start_min": 780, "time": "13:00", "ends_at": None, "runtime_min": 20})
        assert info.end_label == "13:20"
        assert info.is_end_estimated is True

    def test_falls_back_to_end_min(self):
        info = get_time_range_info({"start_min": 1530, "end_min": 1620})
        assert (info.start_label, info.end_label, info.is_end_estimated) == ("01:30", "03:00", False)

    def test_no_end_at_all(self):
        assert get_time_range_info({"start_min": 600, "end_min": None}).end_label is None


@pytest.mark.parametrize("current,expected", [(None, 1), (0, 1), (1, 2), (2, 0)])
def test_get_next_priority_cycles(current, expected):
    assert get_next_priority(current) == expected
