"""Response schemas for browsing the festival catalog."""

from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class FilmSummary(StrictModel):
    id: str
    title: str
    title_ko: Optional[str] = None
    title_en: Optional[str] = None
    display_title: str
    year: Optional[int] = None
    runtime: Optional[int] = None
    countries: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    synopsis: Optional[str] = None
    directors: List[str] = Field(default_factory=list)


class FilmSearchResponse(StrictModel):
    edition: str = Field(description="Edition id, or 'all'")
    available_sections: List[str] = Field(default_factory=list)
    available_dates: List[str] = Field(default_factory=list)
    available_genres: List[str] = Field(default_factory=list)
    total: int
    films: List[FilmSummary] = Field(default_factory=list)


class FilmScreening(StrictModel):
    id: str
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    code: Optional[str] = None
    with_gv: bool = False
    section: Optional[str] = None
    edition_id: str


class FilmDetailResponse(StrictModel):
    film: FilmSummary
    screenings: List[FilmScreening] = Field(default_factory=list)


class EditionOption(StrictModel):
    id: str
    label: str


class EditionResponse(EditionOption):
    festival_id: Optional[str] = None
    year: Optional[int] = None
    edition_number: Optional[int] = None


class ScreeningBadge(StrictModel):
    key: str
    type: str
    label: str


class BundleFilmItem(StrictModel):
    film_id: str
    title: str


class ScreeningItem(StrictModel):
    id: str
    film_id: str
    film_title: str
    edition_id: str
    section: Optional[str] = None
    date: str
    time: str
    venue: Optional[str] = None
    code: Optional[str] = None
    with_gv: bool = False
    dialogue: Optional[str] = None
    subtitles: Optional[str] = None
    rating: Optional[str] = None
    start_min: int
    end_min: int
    lang: str = ""
    badges: List[ScreeningBadge] = Field(default_factory=list)
    bundle_films: List[BundleFilmItem] = Field(default_factory=list)
    is_favorite: Optional[bool] = Field(default=None, description="Only set for signed-in users")


class ScreeningBrowseResponse(StrictModel):
    editions: List[EditionOption] = Field(default_factory=list)
    current_edition: Optional[str] = None
    edition_label: Optional[str] = None
    dates: List[str] = Field(default_factory=list)
    sections: List[str] = Field(default_factory=list)
    date_label: str = ""
    total: int
    items: List[ScreeningItem] = Field(default_factory=list)
