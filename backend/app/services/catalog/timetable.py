"""
Timetable layout math.

Times are "absolute minutes": minutes since midnight of the festival day,
where anything before 08:00 belongs to the previous night and is pushed past
24:00 (01:30 -> 1530). A festival day therefore runs 08:00-27:00 on screen.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, List, NamedTuple, Optional, Sequence, TypeVar

DAY_START_MIN = 8 * 60
DAY_END_MIN = 27 * 60
LOGICAL_DAY_END_MIN = 30 * 60
TOTAL_MIN = DAY_END_MIN - DAY_START_MIN
HOUR_MARKS = list(range(8, 27))

MINUTES_PER_DAY = 24 * 60

RowT = TypeVar("RowT")


class SlotScreening(NamedTuple):
    start_abs: int
    end_abs: int


@dataclass(frozen=True)
class TimeRangeInfo:
    start_label: str
    end_label: Optional[str]
    is_end_estimated: bool = False


def _row_value(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _row_end(row: Any) -> int:
    start = _row_value(row, "start_min")
    end = _row_value(row, "end_min")
    return end + MINUTES_PER_DAY if end <= start else end


def group_by_overlap(rows: Sequence[RowT]) -> List[List[RowT]]:
    """
    Greedy interval grouping.

    Rows are sorted by ``start_min``; a row joins the open group while it
    starts before the group's furthest end, otherwise it opens a new group.
    Rows may be dicts or objects exposing ``start_min``/``end_min``.
    """
    if not rows:
        return []

    ordered = sorted(rows, key=lambda r: _row_value(r, "start_min"))
    groups: List[List[RowT]] = []
    current: List[RowT] = [ordered[0]]
    cur_end = _row_end(ordered[0])

    for row in ordered[1:]:
        if _row_value(row, "start_min") < cur_end:
            current.append(row)
            cur_end = max(cur_end, _row_end(row))
        else:
            groups.append(current)
            current = [row]
            cur_end = _row_end(row)

    groups.append(current)
    return groups


def idx_from_size(size: int) -> int:
    """Width class of an overlap group: 0 for a single row, capped at 4."""
    return 4 if size >= 5 else size - 1


def step_offset(delta: float, step: float) -> int:
    """Number of whole steps a drag of ``delta`` pixels moves."""
    ratio = delta / step
    if ratio >= 0:
        return math.floor(ratio + 0.5)
    return math.ceil(ratio)


def hm_to_minutes(value: Optional[str]) -> Optional[int]:
    """``"HH:MM"`` (or the time part of an ISO string) to minutes since midnight."""
    if not value:
        return None
    text = value[11:16] if len(value) > 10 and value[10] in ("T", " ") else value[:5]
    parts = text.split(":")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]) * 60 + int(parts[1])
    except ValueError:
        return None


def iso_to_abs_minutes(iso: str) -> int:
    """Local time of an ISO timestamp as absolute minutes; before 08:00 rolls to the previous day."""
    minutes = hm_to_minutes(iso) or 0
    if minutes < DAY_START_MIN:
        minutes += MINUTES_PER_DAY
    return minutes


def abs_minutes_to_hm(abs_min: int) -> str:
    minutes = abs_min % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def count_screenings_for_slot(screenings: Sequence[SlotScreening], slot_start: int, slot_end: int) -> int:
    """Screenings that fit entirely inside ``[slot_start, slot_end]``."""
    return sum(1 for s in screenings if s.start_abs >= slot_start and s.end_abs <= slot_end)


def get_time_range_info(row: Any) -> TimeRangeInfo:
    """
    Display labels for a timetable row.

    The end label comes from ``ends_at`` when known, else from ``runtime_min``
    (marked as estimated), else from ``end_min``.
    """
    start_min = _row_value(row, "start_min")
    start_label = _row_value(row, "time") or abs_minutes_to_hm(start_min)

    ends_at = _row_value(row, "ends_at")
    if ends_at:
        return TimeRangeInfo(start_label, abs_minutes_to_hm(iso_to_abs_minutes(ends_at)))

    runtime = _row_value(row, "runtime_min")
    if runtime:
        return TimeRangeInfo(start_label, abs_minutes_to_hm(start_min + runtime), True)

    end_min = _row_value(row, "end_min")
    if end_min is not None:
        return TimeRangeInfo(start_label, abs_minutes_to_hm(end_min))
    return TimeRangeInfo(start_label, None)


def get_next_priority(priority: Optional[int]) -> int:
    """Cycle a favorite's priority: unset/0 -> 1 -> 2 -> 0."""
    if not priority:
        return 1
    if priority == 1:
        return 2
    return 0
