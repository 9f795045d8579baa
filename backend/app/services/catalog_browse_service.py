# backend/app/services/catalog_browse_service.py
"""
Read-only service for browsing the festival catalog.

Wraps the in-memory catalog browsers and, for signed-in users, marks which
screenings are already favorites:
    /films → film line-up with section/date/genre filters
    /films/{film_id} → film detail with every screening
    /screenings → flat screening list of one edition
    /editions → known editions in display order
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .catalog import CatalogStore, FilmBrowser, ScreeningBrowser, edition_label, get_catalog, sort_editions

logger = logging.getLogger(__name__)


class CatalogBrowseService(BaseService):
    """Browse films and screenings. Read-only."""

    def __init__(self, db: Session, store: Optional[CatalogStore] = None) -> None:
        super().__init__(db)
        self.store = store or get_catalog()
        self.favorite_repo = RepositoryFactory.create_favorite_screening_repository(db)
        self.films = FilmBrowser(self.store, default_edition=settings.default_edition_id)
        self.screenings = ScreeningBrowser(self.store, default_edition=settings.default_edition_id)

    # ── Editions ──────────────────────────────────────────────────

    @BaseService.measure_operation("list_editions")
    def list_editions(self) -> List[Dict[str, Any]]:
        ids = [e.id for e in self.store.editions] + [e.edition_id for e in self.store.entries]
        results = []
        for edition_id in sort_editions(i for i in ids if i):
            edition = self.store.edition(edition_id)
            results.append(
                {
                    "id": edition_id,
                    "label": edition_label(edition_id),
                    "festival_id": edition.festival_id if edition else None,
                    "year": edition.year if edition else None,
                    "edition_number": edition.edition_number if edition else None,
                }
            )
        return results

    # ── Films ─────────────────────────────────────────────────────

    @BaseService.measure_operation("search_films")
    def search_films(
        self,
        edition: Optional[str] = None,
        sections: Sequence[str] = (),
        dates: Sequence[str] = (),
        genres: Sequence[str] = (),
        q: str = "",
    ) -> Dict[str, Any]:
        return self.films.search(edition=edition, sections=sections, dates=dates, genres=genres, q=q)

    @BaseService.measure_operation("get_film")
    def get_film(self, film_id: str) -> Dict[str, Any]:
        """Film detail. Raises NotFoundException for unknown ids."""
        return self.films.film_detail(film_id)

    # ── Screenings ────────────────────────────────────────────────

    @BaseService.measure_operation("browse_screenings")
    def browse_screenings(
        self,
        user_id: Optional[str] = None,
        edition: Optional[str] = None,
        dates: Sequence[str] = (),
        sections: Sequence[str] = (),
        q: str = "",
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Screenings of one edition; ``is_favorite`` is set when ``user_id`` is given."""
        favorite_ids = None
        if user_id:
            favorite_ids = {f.screening_id for f in self.favorite_repo.get_user_favorites(user_id)}
        return self.screenings.browse(
            edition=edition,
            dates=dates,
            sections=sections,
            q=q,
            start=start,
            end=end,
            favorite_ids=favorite_ids,
        )
