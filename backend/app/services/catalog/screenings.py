"""
Screening browser: one flat, filterable list of showtimes per edition.

Screenings that share an edition and a screening code are a "bundle" (a
program of short films shown together). A bundle is presented as a single
row whose title joins every film in it.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ...core.constants import (
    BIFF_EDITION_PREFIX,
    DEFAULT_RUNTIME_MINUTES,
    EDITION_LABELS,
    JIFF_EDITION_PREFIX,
)
from ...utils.formatting import clamp, hm, md_k, ymd
from .store import CatalogStore, Film

BAND_BASE_MIN = 6 * 60


@dataclass(frozen=True)
class BundleFilm:
    film_id: str
    title: str


@dataclass
class ScreeningRow:
    id: str
    film_id: str
    film_title: str
    edition_id: str
    section: Optional[str]
    date: str
    time: str
    venue: Optional[str]
    code: Optional[str]
    with_gv: bool
    dialogue: Optional[str]
    subtitles: Optional[str]
    rating: Optional[str]
    start_min: int
    end_min: int
    bundle_films: List[BundleFilm] = field(default_factory=list)

    @property
    def lang_label(self) -> str:
        return make_lang_label(self.dialogue, self.subtitles, self.edition_id)

    @property
    def badges(self) -> List[Dict[str, str]]:
        return make_badges(self.rating, self.lang_label, self.with_gv)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "film_id": self.film_id,
            "film_title": self.film_title,
            "edition_id": self.edition_id,
            "section": self.section,
            "date": self.date,
            "time": self.time,
            "venue": self.venue,
            "code": self.code,
            "with_gv": self.with_gv,
            "dialogue": self.dialogue,
            "subtitles": self.subtitles,
            "rating": self.rating,
            "start_min": self.start_min,
            "end_min": self.end_min,
            "lang": self.lang_label,
            "badges": self.badges,
            "bundle_films": [{"film_id": b.film_id, "title": b.title} for b in self.bundle_films],
        }


# ── Pure helpers ──────────────────────────────────────────────


def build_bundle_key(edition_id: Optional[str], code: Optional[str]) -> Optional[str]:
    c = (code or "").strip()
    if not edition_id or not c:
        return None
    return f"{edition_id}__{c}"


def parse_hm_to_min(value: Optional[str]) -> Optional[int]:
    """``"HH:MM"`` to minutes, None when the value is not two numeric parts."""
    if not value:
        return None
    parts = value.split(":")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0].strip() or 0) * 60 + int(parts[1].strip() or 0)
    except ValueError:
        return None


def _loose_minutes(value: str) -> int:
    """Minutes of an ``HH:MM`` label; unparsable parts count as zero."""
    parts = (value or "").split(":")
    total = 0
    for idx, part in enumerate(parts[:2]):
        try:
            n = int(part)
        except ValueError:
            n = 0
        total += n * 60 if idx == 0 else n
    return total


def make_lang_label(dialogue: Optional[str], subtitles: Optional[str], edition_id: Optional[str]) -> str:
    """
    Language badge text; each festival encodes it differently.

    JIFF ships dialogue and subtitle codes with ``X`` meaning none. BIFF
    ships a single Y/N flag for English subtitles.
    """
    d = (dialogue or "").strip()
    s = (subtitles or "").strip()
    edition = edition_id or ""

    if edition.startswith(JIFF_EDITION_PREFIX):
        d_show = d if d and d != "X" else ""
        s_show = s if s and s != "X" else ""
        if d_show and s_show:
            return f"{d_show}/{s_show}"
        return d_show or s_show

    if edition.startswith(BIFF_EDITION_PREFIX):
        mark = (s or d).strip().upper()
        if not mark or mark == "N":
            return ""
        if mark == "Y":
            return "KE"
        return mark

    if d and s:
        return f"{d}/{s}"
    return d or s


def make_badges(rating: Optional[str], lang: Optional[str], with_gv: bool) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    r = (rating or "").strip()
    lang_text = (lang or "").strip()
    if r:
        out.append({"key": f"r:{r}", "type": "rating", "label": r})
    if lang_text:
        out.append({"key": f"l:{lang_text}", "type": "lang", "label": lang_text})
    if with_gv:
        out.append({"key": "gv", "type": "gv", "label": "GV"})
    return out


def edition_sort_key(edition_id: str):
    if edition_id.startswith(JIFF_EDITION_PREFIX):
        rank = 0
    elif edition_id.startswith(BIFF_EDITION_PREFIX):
        rank = 1
    else:
        rank = 99
    return (rank, edition_id)


def sort_editions(edition_ids: Iterable[str]) -> List[str]:
    """JIFF editions first, then BIFF, then everything else; ties by id."""
    return sorted(set(edition_ids), key=edition_sort_key)


def edition_label(edition_id: str) -> str:
    return EDITION_LABELS.get(edition_id, edition_id)


def hm_from_minutes(minutes: int) -> str:
    minutes = int(minutes) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hm_to_band_minutes(value: str) -> Optional[int]:
    """Position of a clock time on the 06:00-based slider band (0..1439)."""
    minutes = parse_hm_to_min(value)
    if minutes is None:
        return None
    band = minutes - BAND_BASE_MIN
    return band + 24 * 60 if band < 0 else band


def band_minutes_to_hm(band: int) -> str:
    band = int(clamp(band, 0, 24 * 60 - 1))
    return hm_from_minutes((band + BAND_BASE_MIN) % (24 * 60))


def date_label(dates: Sequence[str]) -> str:
    if not dates:
        return "All dates"
    if len(dates) == 1:
        return md_k(dates[0])
    return f"{len(dates)}일 선택"


# ── Row building ──────────────────────────────────────────────


def _bundle_end(films: Sequence[Film], start_min: int) -> int:
    runtimes = [f.runtime for f in films]
    if runtimes and all(isinstance(r, int) and r > 0 for r in runtimes):
        return start_min + sum(runtimes)
    return start_min + DEFAULT_RUNTIME_MINUTES


def build_rows(store: CatalogStore) -> List[ScreeningRow]:
    """Flatten the catalog into deduplicated screening rows."""
    bundle_map: Dict[str, "OrderedDict[str, Film]"] = {}
    for screening in store.screenings:
        entry = store.entry(screening.entry_id)
        if entry is None:
            continue
        key = build_bundle_key(entry.edition_id, screening.code)
        film = store.film(entry.film_id)
        if key is None or film is None:
            continue
        bundle_map.setdefault(key, OrderedDict()).setdefault(film.id, film)

    rows: List[ScreeningRow] = []
    seen: Set[str] = set()
    for screening in store.screenings:
        entry = store.entry(screening.entry_id)
        if entry is None:
            continue
        film = store.film(entry.film_id)

        date = ymd(screening.starts_at)
        time = hm(screening.starts_at)
        dedupe_key = f"{entry.edition_id}__{screening.code or screening.id}__{date}__{time}"
        if dedupe_key in seen:
            continue
        seen.add(dedupe_key)

        key = build_bundle_key(entry.edition_id, screening.code)
        bundle = list(bundle_map.get(key, {}).values()) if key else []

        start_min = _loose_minutes(time)
        if screening.ends_at:
            end_min = _loose_minutes(hm(screening.ends_at))
        elif len(bundle) > 1:
            end_min = _bundle_end(bundle, start_min)
        else:
            runtime = film.runtime if film and film.runtime else DEFAULT_RUNTIME_MINUTES
            end_min = start_min + runtime
        if end_min <= start_min:
            end_min += 24 * 60

        own_title = film.display_title if film else entry.film_id
        bundle_films = [BundleFilm(f.id, f.display_title) for f in bundle]
        if len(bundle_films) > 1:
            primary = [b for b in bundle_films if b.film_id == entry.film_id]
            others = sorted((b for b in bundle_films if b.film_id != entry.film_id), key=lambda b: b.title)
            title = " + ".join(b.title for b in primary + others)
        else:
            title = own_title

        rows.append(
            ScreeningRow(
                id=screening.id,
                film_id=entry.film_id,
                film_title=title,
                edition_id=entry.edition_id,
                section=entry.section,
                date=date,
                time=time,
                venue=screening.venue,
                code=screening.code,
                with_gv=screening.with_gv,
                dialogue=screening.dialogue,
                subtitles=screening.subtitles,
                rating=screening.rating,
                start_min=start_min,
                end_min=end_min,
                bundle_films=bundle_films,
            )
        )
    return rows


@lru_cache(maxsize=4)
def screening_rows(store: CatalogStore) -> List[ScreeningRow]:
    """Rows of a store, built once per store instance."""
    return build_rows(store)


def _row_sort_key(row: ScreeningRow):
    return (row.date, row.time, row.section or "", row.venue or "", row.film_title)


class ScreeningBrowser:
    """
    Filter and sort screening rows for one edition.

    Rows are built once per store and reused across requests.
    """

    def __init__(self, store: CatalogStore, default_edition: Optional[str] = None):
        self.store = store
        self.default_edition = default_edition

    @property
    def rows(self) -> List[ScreeningRow]:
        return screening_rows(self.store)

    def editions(self) -> List[str]:
        return sort_editions(row.edition_id for row in self.rows if row.edition_id)

    def resolve_edition(self, edition: Optional[str]) -> Optional[str]:
        editions = self.editions()
        if edition and edition in editions:
            return edition
        if self.default_edition and self.default_edition in editions:
            return self.default_edition
        return editions[0] if editions else None

    def browse(
        self,
        edition: Optional[str] = None,
        dates: Sequence[str] = (),
        sections: Sequence[str] = (),
        q: str = "",
        start: Optional[str] = None,
        end: Optional[str] = None,
        favorite_ids: Optional[Set[str]] = None,
    ) -> Dict[str, Any]:
        """
        Args:
            edition: Edition id; unknown or missing falls back to the first edition
            dates: ``YYYY-MM-DD`` values, any of which may match
            sections: Section names, any of which may match
            q: Free text over title, venue, section and code
            start, end: ``HH:MM`` window; ignored unless both parse and end > start
            favorite_ids: The viewer's favorite screening ids, when signed in
        """
        current = self.resolve_edition(edition)
        edition_rows = [row for row in self.rows if row.edition_id == current]

        all_dates = sorted({row.date for row in edition_rows if row.date})
        all_sections = sorted({row.section for row in edition_rows if row.section})

        filtered = edition_rows
        if dates:
            wanted_dates = set(dates)
            filtered = [row for row in filtered if row.date in wanted_dates]
        if sections:
            wanted_sections = set(sections)
            filtered = [row for row in filtered if row.section in wanted_sections]

        needle = (q or "").strip().lower()
        if needle:
            filtered = [
                row
                for row in filtered
                if needle
                in " ".join(
                    [row.film_title or "", row.venue or "", row.section or "", row.code or ""]
                ).lower()
            ]

        start_min = parse_hm_to_min(start) if start else None
        end_min = parse_hm_to_min(end) if end else None
        if start_min is not None and end_min is not None and end_min > start_min:
            filtered = [row for row in filtered if row.start_min >= start_min and row.end_min <= end_min]

        filtered = sorted(filtered, key=_row_sort_key)

        items = []
        for row in filtered:
            item = row.to_dict()
            if favorite_ids is not None:
                item["is_favorite"] = row.id in favorite_ids
            items.append(item)

        return {
            "editions": [{"id": e, "label": edition_label(e)} for e in self.editions()],
            "current_edition": current,
            "edition_label": edition_label(current) if current else None,
            "dates": all_dates,
            "sections": all_sections,
            "date_label": date_label(list(dates)),
            "total": len(items),
            "items": items,
        }
