"""
Compact catalog and taste context for the planner prompt.

Field names are single letters to keep the prompt small:
    i=id, t=title, s=start, e=end, v=venue, g=genres, d=directors, r=rating
"""

from __future__ import annotations

from typing import Dict, List, Sequence, TypedDict

from sqlalchemy.orm import Session

from ...core.constants import PLANNER_DEFAULT_RUNTIME_MINUTES, TASTE_CONTEXT_LIMIT, TASTE_MIN_RATING
from ...repositories.factory import RepositoryFactory
from ...utils.formatting import hm, ymd
from ..catalog.store import CatalogStore, Film


class MinifiedScreening(TypedDict):
    i: str
    t: str
    s: str
    e: str
    v: str
    g: str
    d: str


class MinifiedTaste(TypedDict):
    t: str
    r: float
    g: str
    d: str


def _add_minutes(start_hm: str, minutes: int) -> str:
    hh, mm = start_hm.split(":")
    total = (int(hh) * 60 + int(mm) + minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def _title(film: Film) -> str:
    return film.title_ko or film.title or "Untitled"


def get_screenings_context(
    store: CatalogStore, edition_id: str, dates: Sequence[str]
) -> Dict[str, List[MinifiedScreening]]:
    """Screenings of one edition on the given dates, grouped by date and sorted by start."""
    result: Dict[str, List[MinifiedScreening]] = {date: [] for date in dates}

    for screening in store.screenings:
        if not screening.starts_at:
            continue
        day = ymd(screening.starts_at)
        if day not in result:
            continue
        entry = store.entry(screening.entry_id)
        if entry is None or entry.edition_id != edition_id:
            continue
        film = store.film(entry.film_id)
        if film is None:
            continue

        start = hm(screening.starts_at)
        if screening.ends_at:
            end = hm(screening.ends_at)
        else:
            end = _add_minutes(start, film.runtime or PLANNER_DEFAULT_RUNTIME_MINUTES)

        result[day].append(
            {
                "i": screening.id,
                "t": _title(film),
                "s": start,
                "e": end,
                "v": screening.venue or "Unknown",
                "g": ",".join(film.genres),
                "d": ",".join(film.directors),
            }
        )

    for items in result.values():
        items.sort(key=lambda item: item["s"])
    return result


def get_user_taste_context(db: Session, store: CatalogStore, user_id: str) -> List[MinifiedTaste]:
    """The user's best-rated films; films missing from the catalog are skipped."""
    repo = RepositoryFactory.create_user_entry_repository(db)
    entries = repo.top_rated_for_user(user_id, min_rating=TASTE_MIN_RATING, limit=TASTE_CONTEXT_LIMIT)

    taste: List[MinifiedTaste] = []
    for entry in entries:
        film = store.film(entry.film_id)
        if film is None:
            continue
        taste.append(
            {
                "t": film.title_ko or film.title,
                "r": float(entry.rating),
                "g": ",".join(film.genres),
                "d": ",".join(film.directors),
            }
        )
    return taste
