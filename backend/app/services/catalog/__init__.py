"""
Static festival catalog: loading, integrity checks, and the film, screening
and timetable computations built on top of it.
"""

from app.services.catalog.films import ALL_EDITIONS, FilmBrowser
from app.services.catalog.screenings import (
    ScreeningBrowser,
    ScreeningRow,
    build_rows,
    edition_label,
    sort_editions,
)
from app.services.catalog.store import (
    CatalogStore,
    Edition,
    Entry,
    Film,
    Screening,
    get_catalog,
    reset_catalog,
)
from app.services.catalog.validation import ValidationReport, validate_catalog

__all__ = [
    "ALL_EDITIONS",
    "CatalogStore",
    "Edition",
    "Entry",
    "Film",
    "FilmBrowser",
    "Screening",
    "ScreeningBrowser",
    "ScreeningRow",
    "ValidationReport",
    "build_rows",
    "edition_label",
    "get_catalog",
    "reset_catalog",
    "sort_editions",
    "validate_catalog",
]
