"""Schemas for user search, public profiles, follows and blocks."""

from datetime import datetime
from typing import Optional

from ._strict_base import StrictModel


class UserSearchItem(StrictModel):
    id: str
    nickname: Optional[str] = None
    is_following: bool = False


class UserProfileResponse(StrictModel):
    id: str
    nickname: Optional[str] = None
    bio: Optional[str] = None
    letterboxd_id: Optional[str] = None
    follower_count: int = 0
    following_count: int = 0
    is_following: bool = False
    is_blocking: bool = False
    is_me: bool = False


class UserRatingItem(StrictModel):
    id: str
    film_id: str
    film_title: str
    rating: Optional[float] = None
    short_review: Optional[str] = None
    updated_at: datetime


class FollowListItem(StrictModel):
    id: str
    nickname: Optional[str] = None
    is_following: bool = False
    is_me: bool = False


class FollowToggleResponse(StrictModel):
    following: bool


class BlockToggleResponse(StrictModel):
    blocking: bool


class BlockedUserItem(StrictModel):
    id: str
    nickname: Optional[str] = None
