# backend/app/routes/v1/catalog.py
"""
Catalog browse routes - the static festival line-up.

Endpoints under /api/v1/catalog:
    GET /editions              → Known editions in display order
    GET /films                 → Film line-up with section/date/genre filters
    GET /films/{film_id}       → Film detail with every screening
    GET /screenings            → Screenings of one edition (favorites marked when signed in)

Multi-value filters are comma separated; values containing commas are quoted.
"""

import asyncio
import logging
from typing import List, Optional, cast

from fastapi import APIRouter, Depends, Query, Response
from fastapi.params import Path

from ...api.dependencies import get_current_user_optional
from ...api.dependencies.services import get_catalog_browse_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.catalog import (
    EditionResponse,
    FilmDetailResponse,
    FilmSearchResponse,
    ScreeningBrowseResponse,
)
from ...services.catalog_browse_service import CatalogBrowseService
from ...utils.csv_params import parse_csv

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog-v1"])


@router.get("/editions", response_model=List[EditionResponse])
async def list_editions(
    response: Response,
    service: CatalogBrowseService = Depends(get_catalog_browse_service),
) -> List[EditionResponse]:
    """JIFF editions first, then BIFF, then the rest. Cached 1hr."""
    try:
        data = await asyncio.to_thread(service.list_editions)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    response.headers["Cache-Control"] = "public, max-age=3600"
    return cast(List[EditionResponse], data)


@router.get("/films", response_model=FilmSearchResponse)
async def search_films(
    response: Response,
    edition: Optional[str] = Query(None, description="Edition id, or 'all'"),
    sections: Optional[str] = Query(None),
    dates: Optional[str] = Query(None, description="YYYY-MM-DD values"),
    genres: Optional[str] = Query(None),
    q: Optional[str] = Query(None, max_length=100),
    service: CatalogBrowseService = Depends(get_catalog_browse_service),
) -> FilmSearchResponse:
    try:
        data = await asyncio.to_thread(
            service.search_films,
            edition=edition,
            sections=parse_csv(sections),
            dates=parse_csv(dates),
            genres=parse_csv(genres),
            q=q or "",
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    response.headers["Cache-Control"] = "public, max-age=300"
    return FilmSearchResponse(**data)


@router.get("/films/{film_id}", response_model=FilmDetailResponse)
async def get_film(
    response: Response,
    film_id: str = Path(..., min_length=1, max_length=128),
    service: CatalogBrowseService = Depends(get_catalog_browse_service),
) -> FilmDetailResponse:
    try:
        data = await asyncio.to_thread(service.get_film, film_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    response.headers["Cache-Control"] = "public, max-age=300"
    return FilmDetailResponse(**data)


@router.get("/screenings", response_model=ScreeningBrowseResponse)
async def browse_screenings(
    edition: Optional[str] = Query(None),
    dates: Optional[str] = Query(None),
    sections: Optional[str] = Query(None),
    q: Optional[str] = Query(None, max_length=100),
    start: Optional[str] = Query(None, description="Window start, HH:MM"),
    end: Optional[str] = Query(None, description="Window end, HH:MM"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CatalogBrowseService = Depends(get_catalog_browse_service),
) -> ScreeningBrowseResponse:
    """
    Flat screening list of one edition.

    Bundled screenings (several films under one code) are listed once.
    Rows are grouped by the calendar date of their start time.
    """
    try:
        data = await asyncio.to_thread(
            service.browse_screenings,
            user_id=current_user.id if current_user else None,
            edition=edition,
            dates=parse_csv(dates),
            sections=parse_csv(sections),
            q=q or "",
            start=start,
            end=end,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return ScreeningBrowseResponse(**data)
