"""
Personal timetable: the user's favorite screenings laid out per festival day.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_RUNTIME_MINUTES
from ..repositories.factory import RepositoryFactory
from ..utils.formatting import hm, is_weekend, md_k, ymd
from .base import BaseService
from .catalog import CatalogStore, edition_label, get_catalog, sort_editions
from .catalog.timetable import (
    DAY_END_MIN,
    DAY_START_MIN,
    HOUR_MARKS,
    MINUTES_PER_DAY,
    get_time_range_info,
    group_by_overlap,
    idx_from_size,
    iso_to_abs_minutes,
)

logger = logging.getLogger(__name__)


class TimetableService(BaseService):
    def __init__(self, db: Session, store: Optional[CatalogStore] = None) -> None:
        super().__init__(db)
        self.store = store or get_catalog()
        self.favorite_repo = RepositoryFactory.create_favorite_screening_repository(db)

    def _rows_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for favorite in self.favorite_repo.get_user_favorites(user_id):
            screening = self.store.screening(favorite.screening_id)
            if screening is None or not screening.starts_at:
                continue
            entry = self.store.entry(screening.entry_id)
            if entry is None:
                continue
            film = self.store.film(entry.film_id)

            start_min = iso_to_abs_minutes(screening.starts_at)
            runtime = film.runtime if film and film.runtime else None
            if screening.ends_at:
                end_min = iso_to_abs_minutes(screening.ends_at)
                if end_min <= start_min:
                    end_min += MINUTES_PER_DAY
            else:
                end_min = start_min + (runtime or DEFAULT_RUNTIME_MINUTES)

            rows.append(
                {
                    "id": screening.id,
                    "film_id": entry.film_id,
                    "film_title": film.display_title if film else entry.film_id or entry.id,
                    "date": ymd(screening.starts_at),
                    "time": hm(screening.starts_at),
                    "ends_at": screening.ends_at,
                    "runtime_min": runtime,
                    "edition_id": entry.edition_id,
                    "section": entry.section,
                    "venue": screening.venue,
                    "code": screening.code,
                    "with_gv": screening.with_gv,
                    "subtitles": screening.subtitles,
                    "rating": screening.rating,
                    "start_min": start_min,
                    "end_min": end_min,
                    "priority": favorite.priority,
                    "sort_order": favorite.sort_order,
                }
            )
        return rows

    @BaseService.measure_operation("build_timetable")
    def build(self, user_id: str, edition: Optional[str] = None, date: Optional[str] = None) -> Dict[str, Any]:
        """
        Timetable of one edition and day.

        Unknown ``edition``/``date`` fall back to the first available value.
        A user without favorites gets an empty timetable.
        """
        all_rows = self._rows_for_user(user_id)

        editions = sort_editions(row["edition_id"] for row in all_rows if row["edition_id"])
        current_edition = edition if edition in editions else (editions[0] if editions else None)

        edition_rows = [row for row in all_rows if row["edition_id"] == current_edition]
        dates = sorted({row["date"] for row in edition_rows if row["date"]})
        current_date = date if date in dates else (dates[0] if dates else None)

        day_rows = sorted(
            (row for row in edition_rows if row["date"] == current_date),
            key=lambda r: (r["start_min"], r["time"]),
        )
        for row in day_rows:
            info = get_time_range_info(row)
            row["start_label"] = info.start_label
            row["end_label"] = info.end_label
            row["is_end_estimated"] = info.is_end_estimated

        groups = []
        for group in group_by_overlap(day_rows):
            groups.append(
                {
                    "size_index": idx_from_size(len(group)),
                    "start_min": group[0]["start_min"],
                    "screening_ids": [row["id"] for row in group],
                }
            )

        return {
            "editions": [{"id": e, "label": edition_label(e)} for e in editions],
            "current_edition": current_edition,
            "edition_label": edition_label(current_edition) if current_edition else None,
            "dates": [{"date": d, "label": md_k(d), "is_weekend": is_weekend(d)} for d in dates],
            "current_date": current_date,
            "rows": day_rows,
            "groups": groups,
            "day_start_min": DAY_START_MIN,
            "day_end_min": DAY_END_MIN,
            "hour_marks": HOUR_MARKS,
        }
