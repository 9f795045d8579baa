"""
Pydantic schemas for favorite screenings.

Defines request and response models for the favorite screening endpoints.
"""

from typing import List, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class FavoriteScreeningItem(StrictModel):
    screening_id: str
    priority: Optional[int] = None
    sort_order: Optional[int] = None


class FavoriteScreeningListResponse(StrictModel):
    items: List[FavoriteScreeningItem] = Field(default_factory=list)


class FavoriteScreeningResponse(FavoriteScreeningItem):
    id: str


class FavoriteScreeningMineResponse(StrictModel):
    items: List[FavoriteScreeningResponse] = Field(default_factory=list)


class FavoriteScreeningUpdate(StrictRequestModel):
    """
    Favorite toggle / priority / sort order update.

    ``priority`` and ``sort_order`` are only written when present in the body;
    an explicit null clears them.
    """

    screening_id: Optional[str] = None
    favorite: Optional[bool] = Field(default=True, description="False removes the favorite")
    priority: Optional[int] = Field(default=None, ge=0, le=2)
    sort_order: Optional[int] = None

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        json_schema_extra={
            "example": {"screening_id": "scr_jiff_2025_0001", "favorite": True, "priority": 1}
        },
    )
