"""Film browser: the festival line-up with section/date/genre filters."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ...core.exceptions import NotFoundException
from ...utils.formatting import ymd
from .store import CatalogStore, Entry, Film

ALL_EDITIONS = "all"


class FilmBrowser:
    def __init__(self, store: CatalogStore, default_edition: Optional[str] = None):
        self.store = store
        self.default_edition = default_edition or ALL_EDITIONS

    def _entries_in(self, edition: str) -> List[Entry]:
        if edition == ALL_EDITIONS:
            return list(self.store.entries)
        return [e for e in self.store.entries if e.edition_id == edition]

    def _dates_of(self, entry: Entry) -> List[str]:
        return [ymd(s.starts_at) for s in self.store.screenings_for_entry(entry.id) if s.starts_at]

    @staticmethod
    def _matches_query(film: Film, needle: str) -> bool:
        hay = " ".join(
            [film.title or "", film.title_ko or "", film.title_en or ""]
            + list(film.directors)
            + list(film.tags)
        ).lower()
        return needle in hay

    def search(
        self,
        edition: Optional[str] = None,
        sections: Sequence[str] = (),
        dates: Sequence[str] = (),
        genres: Sequence[str] = (),
        q: str = "",
    ) -> Dict[str, Any]:
        """
        Films of an edition (or ``"all"``) matching every given filter.

        Each filter is an OR over its values; filters combine with AND.
        """
        current = edition or self.default_edition
        entries = self._entries_in(current)

        available_sections = sorted({e.section for e in entries if e.section})
        available_dates = sorted({d for e in entries for d in self._dates_of(e)})
        available_genres = sorted({g for f in self.store.films for g in f.genres})

        if sections:
            wanted_sections = set(sections)
            entries = [e for e in entries if e.section in wanted_sections]
        if dates:
            wanted_dates = set(dates)
            entries = [e for e in entries if wanted_dates.intersection(self._dates_of(e))]

        films: List[Film] = []
        seen = set()
        for entry in entries:
            if entry.film_id in seen:
                continue
            film = self.store.film(entry.film_id)
            if film is None:
                continue
            seen.add(entry.film_id)
            films.append(film)

        if genres:
            wanted_genres = set(genres)
            films = [f for f in films if wanted_genres.intersection(f.genres)]

        needle = (q or "").strip().lower()
        if needle:
            films = [f for f in films if self._matches_query(f, needle)]

        films.sort(key=lambda f: (f.title or f.display_title).lower())

        return {
            "edition": current,
            "available_sections": available_sections,
            "available_dates": available_dates,
            "available_genres": available_genres,
            "total": len(films),
            "films": [f.to_dict() for f in films],
        }

    def film_detail(self, film_id: str) -> Dict[str, Any]:
        """The film with every screening across its entries, in start order."""
        film = self.store.film(film_id)
        if film is None:
            raise NotFoundException("Film not found", code="FILM_NOT_FOUND", details={"film_id": film_id})

        shows = []
        for entry in self.store.entries_for_film(film.id):
            for screening in self.store.screenings_for_entry(entry.id):
                shows.append(
                    {
                        "id": screening.id,
                        "starts_at": screening.starts_at,
                        "ends_at": screening.ends_at,
                        "venue": screening.venue,
                        "city": screening.city,
                        "code": screening.code,
                        "with_gv": screening.with_gv,
                        "section": entry.section,
                        "edition_id": entry.edition_id,
                    }
                )
        shows.sort(key=lambda s: s["starts_at"] or "")
        return {"film": film.to_dict(), "screenings": shows}
