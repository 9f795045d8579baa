"""Response schema for the personal timetable."""

from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel
from .catalog import EditionOption


class TimetableRow(StrictModel):
    id: str
    film_id: str
    film_title: str
    date: str
    time: str
    ends_at: Optional[str] = None
    runtime_min: Optional[int] = None
    edition_id: str
    section: Optional[str] = None
    venue: Optional[str] = None
    code: Optional[str] = None
    with_gv: bool = False
    subtitles: Optional[str] = None
    rating: Optional[str] = None
    start_min: int = Field(description="Minutes from midnight; after-midnight shows run past 1440")
    end_min: int
    priority: Optional[int] = None
    sort_order: Optional[int] = None
    start_label: str
    end_label: Optional[str] = None
    is_end_estimated: bool = False


class TimetableGroup(StrictModel):
    size_index: int = Field(description="Width class of the overlap group, 0 (single row) to 4")
    start_min: int
    screening_ids: List[str]


class TimetableDate(StrictModel):
    date: str
    label: str
    is_weekend: bool


class TimetableResponse(StrictModel):
    editions: List[EditionOption] = Field(default_factory=list)
    current_edition: Optional[str] = None
    edition_label: Optional[str] = None
    dates: List[TimetableDate] = Field(default_factory=list)
    current_date: Optional[str] = None
    rows: List[TimetableRow] = Field(default_factory=list)
    groups: List[TimetableGroup] = Field(default_factory=list)
    day_start_min: int
    day_end_min: int
    hour_marks: List[int]
