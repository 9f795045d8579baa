# backend/app/services/catalog/store.py
"""
In-memory festival catalog.

The catalog is read-only reference data shipped as four JSON files
(films, entries, screenings, editions). It is loaded once per process and
indexed by id; user-owned state lives in the database and refers to
catalog rows by id only.

JSON keys are camelCase (``filmId``, ``startsAt``, ``withGV``); the loaded
dataclasses use snake_case.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from functools import lru_cache
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ...core.config import settings

logger = logging.getLogger(__name__)

CATALOG_FILES = ("films.json", "entries.json", "screenings.json", "editions.json")


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class Film:
    id: str
    title: str
    title_ko: Optional[str] = None
    title_en: Optional[str] = None
    year: Optional[int] = None
    runtime: Optional[int] = None
    countries: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    synopsis: Optional[str] = None
    directors: Tuple[str, ...] = ()

    @property
    def display_title(self) -> str:
        return self.title_ko or self.title or self.title_en or self.id

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Film":
        credits = raw.get("credits") or {}
        runtime = raw.get("runtime")
        return cls(
            id=str(raw["id"]),
            title=raw.get("title") or "",
            title_ko=raw.get("title_ko"),
            title_en=raw.get("title_en"),
            year=raw.get("year"),
            runtime=runtime if isinstance(runtime, int) and not isinstance(runtime, bool) else None,
            countries=_as_tuple(raw.get("countries")),
            genres=_as_tuple(raw.get("genres")),
            tags=_as_tuple(raw.get("tags")),
            synopsis=raw.get("synopsis"),
            directors=_as_tuple(credits.get("directors")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "title_ko": self.title_ko,
            "title_en": self.title_en,
            "display_title": self.display_title,
            "year": self.year,
            "runtime": self.runtime,
            "countries": list(self.countries),
            "genres": list(self.genres),
            "tags": list(self.tags),
            "synopsis": self.synopsis,
            "directors": list(self.directors),
        }


@dataclass(frozen=True)
class Entry:
    """A film's participation in one edition."""

    id: str
    film_id: str
    edition_id: str
    section: Optional[str] = None
    format: Optional[str] = None
    color: Optional[str] = None
    premiere: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Entry":
        return cls(
            id=str(raw["id"]),
            film_id=str(raw.get("filmId") or ""),
            edition_id=str(raw.get("editionId") or ""),
            section=raw.get("section"),
            format=raw.get("format"),
            color=raw.get("color"),
            premiere=raw.get("premiere"),
        )


@dataclass(frozen=True)
class Screening:
    """One showtime of an entry. ``starts_at``/``ends_at`` are local ISO strings."""

    id: str
    entry_id: str
    code: Optional[str] = None
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    with_gv: bool = False
    dialogue: Optional[str] = None
    subtitles: Optional[str] = None
    rating: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Screening":
        code = raw.get("code")
        return cls(
            id=str(raw["id"]),
            entry_id=str(raw.get("entryId") or ""),
            code=str(code) if code is not None else None,
            starts_at=raw.get("startsAt"),
            ends_at=raw.get("endsAt"),
            venue=raw.get("venue"),
            city=raw.get("city"),
            with_gv=bool(raw.get("withGV")),
            dialogue=raw.get("dialogue"),
            subtitles=raw.get("subtitles"),
            rating=raw.get("rating"),
        )


@dataclass(frozen=True)
class Edition:
    """One year of one festival."""

    id: str
    festival_id: Optional[str] = None
    year: Optional[int] = None
    edition_number: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Edition":
        return cls(
            id=str(raw["id"]),
            festival_id=raw.get("festivalId"),
            year=raw.get("year"),
            edition_number=raw.get("editionNumber"),
        )


@dataclass(eq=False)
class CatalogStore:
    """Films, entries, screenings and editions with id indexes."""

    films: List[Film] = field(default_factory=list)
    entries: List[Entry] = field(default_factory=list)
    screenings: List[Screening] = field(default_factory=list)
    editions: List[Edition] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._films: Dict[str, Film] = {f.id: f for f in self.films}
        self._entries: Dict[str, Entry] = {e.id: e for e in self.entries}
        self._screenings: Dict[str, Screening] = {s.id: s for s in self.screenings}
        self._editions: Dict[str, Edition] = {e.id: e for e in self.editions}

        self._entries_by_film: Dict[str, List[Entry]] = defaultdict(list)
        for entry in self.entries:
            self._entries_by_film[entry.film_id].append(entry)

        self._screenings_by_entry: Dict[str, List[Screening]] = defaultdict(list)
        for screening in self.screenings:
            self._screenings_by_entry[screening.entry_id].append(screening)

    # Construction

    @classmethod
    def from_raw(
        cls,
        films: Iterable[Mapping[str, Any]] = (),
        entries: Iterable[Mapping[str, Any]] = (),
        screenings: Iterable[Mapping[str, Any]] = (),
        editions: Iterable[Mapping[str, Any]] = (),
    ) -> "CatalogStore":
        return cls(
            films=[Film.from_raw(raw) for raw in films],
            entries=[Entry.from_raw(raw) for raw in entries],
            screenings=[Screening.from_raw(raw) for raw in screenings],
            editions=[Edition.from_raw(raw) for raw in editions],
        )

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "CatalogStore":
        raw = load_raw_catalog(directory)
        store = cls.from_raw(**raw)
        logger.info(
            f"Loaded catalog from {directory}: {len(store.films)} films, "
            f"{len(store.entries)} entries, {len(store.screenings)} screenings"
        )
        return store

    # Lookups

    def film(self, film_id: str) -> Optional[Film]:
        return self._films.get(film_id)

    def entry(self, entry_id: str) -> Optional[Entry]:
        return self._entries.get(entry_id)

    def screening(self, screening_id: str) -> Optional[Screening]:
        return self._screenings.get(screening_id)

    def edition(self, edition_id: str) -> Optional[Edition]:
        return self._editions.get(edition_id)

    def entries_for_film(self, film_id: str) -> List[Entry]:
        return list(self._entries_by_film.get(film_id, ()))

    def screenings_for_entry(self, entry_id: str) -> List[Screening]:
        return list(self._screenings_by_entry.get(entry_id, ()))

    def films_in(self, edition_id: str) -> List[Film]:
        """Distinct films with an entry in the edition, in entry order."""
        seen = set()
        out: List[Film] = []
        for entry in self.entries:
            if entry.edition_id != edition_id or entry.film_id in seen:
                continue
            seen.add(entry.film_id)
            film = self._films.get(entry.film_id)
            if film:
                out.append(film)
        return out

    @property
    def size(self) -> Dict[str, int]:
        return {
            "films": len(self.films),
            "entries": len(self.entries),
            "screenings": len(self.screenings),
            "editions": len(self.editions),
        }


def load_raw_catalog(directory: Union[str, Path]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Read the catalog JSON files as plain lists.

    ``editions.json`` is optional; the other three are required.

    Raises:
        FileNotFoundError: a required file is missing
        ValueError: a file is not a JSON array
    """
    base = Path(directory)
    raw: Dict[str, List[Dict[str, Any]]] = {}
    for filename in CATALOG_FILES:
        key = filename[: -len(".json")]
        path = base / filename
        if not path.exists():
            if key == "editions":
                raw[key] = []
                continue
            raise FileNotFoundError(f"Catalog file missing: {path}")
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a JSON array")
        raw[key] = data
    return raw


@lru_cache(maxsize=1)
def get_catalog() -> CatalogStore:
    """Process-wide catalog loaded from ``settings.catalog_path``."""
    return CatalogStore.from_directory(settings.catalog_path)


def reset_catalog() -> None:
    """Drop the cached catalog so the next ``get_catalog`` reloads from disk."""
    get_catalog.cache_clear()
