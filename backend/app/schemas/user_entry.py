"""Schemas for film entries (rating + short review), likes, social reviews and the feed."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class UserEntryResponse(StrictModel):
    id: str
    user_id: str
    film_id: str
    rating: Optional[float] = None
    short_review: str = ""
    like_count: int = 0
    updated_at: datetime


class UserEntryUpsert(StrictRequestModel):
    film_id: Optional[str] = None
    rating: Optional[float] = Field(
        default=None, description="0.0-5.0; zero or less clears the rating"
    )
    short_review: Optional[str] = Field(default=None, description="Truncated to 200 characters")


class LikeToggleResponse(StrictModel):
    liked: bool
    like_count: int


class SocialReviewItem(StrictModel):
    """Another user's entry; fields hidden by their privacy settings are null."""

    id: str
    user_id: str
    film_id: str
    nickname: Optional[str] = None
    rating: Optional[float] = None
    short_review: Optional[str] = None
    like_count: int = 0
    is_liked: bool = False
    updated_at: datetime


class FeedItem(SocialReviewItem):
    film_title: str
    my_rating: Optional[float] = None


class FeedCursor(StrictModel):
    updated_at: datetime
    id: str


class FeedResponse(StrictModel):
    items: List[FeedItem] = Field(default_factory=list)
    next_cursor: Optional[FeedCursor] = None
