# backend/app/schemas/__init__.py
"""
Pydantic schemas for the festival archive API.

Request models forbid unknown fields; response models mirror the service
payloads one to one.
"""

from .account import MeResponse, NicknameCheckResponse, NicknameUpdateRequest, ProfileUpdateRequest
from .auth import (
    DevUpsertUserRequest,
    DevUpsertUserResponse,
    LockStatusResponse,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from .catalog import (
    EditionResponse,
    FilmDetailResponse,
    FilmSearchResponse,
    FilmSummary,
    ScreeningBrowseResponse,
    ScreeningItem,
)
from .favorite_screening import (
    FavoriteScreeningItem,
    FavoriteScreeningListResponse,
    FavoriteScreeningMineResponse,
    FavoriteScreeningResponse,
    FavoriteScreeningUpdate,
)
from .health import HealthResponse, RootResponse
from .planner import ChatMessage, PlannerChatRequest, PlannerChatResponse, PlannerRecommendation
from .privacy import PrivacySettingsResponse, PrivacyUpdateRequest
from .social import (
    BlockedUserItem,
    BlockToggleResponse,
    FollowListItem,
    FollowToggleResponse,
    UserProfileResponse,
    UserRatingItem,
    UserSearchItem,
)
from .timetable import TimetableResponse
from .user_entry import (
    FeedResponse,
    LikeToggleResponse,
    SocialReviewItem,
    UserEntryResponse,
    UserEntryUpsert,
)

__all__ = [
    "BlockToggleResponse",
    "BlockedUserItem",
    "ChatMessage",
    "DevUpsertUserRequest",
    "DevUpsertUserResponse",
    "EditionResponse",
    "FavoriteScreeningItem",
    "FavoriteScreeningListResponse",
    "FavoriteScreeningMineResponse",
    "FavoriteScreeningResponse",
    "FavoriteScreeningUpdate",
    "FeedResponse",
    "FilmDetailResponse",
    "FilmSearchResponse",
    "FilmSummary",
    "FollowListItem",
    "FollowToggleResponse",
    "HealthResponse",
    "LikeToggleResponse",
    "LockStatusResponse",
    "MeResponse",
    "NicknameCheckResponse",
    "NicknameUpdateRequest",
    "PlannerChatRequest",
    "PlannerChatResponse",
    "PlannerRecommendation",
    "PrivacySettingsResponse",
    "PrivacyUpdateRequest",
    "ProfileUpdateRequest",
    "RootResponse",
    "ScreeningBrowseResponse",
    "ScreeningItem",
    "SignupRequest",
    "SignupResponse",
    "SocialReviewItem",
    "TimetableResponse",
    "TokenResponse",
    "UserEntryResponse",
    "UserEntryUpsert",
    "UserProfileResponse",
    "UserRatingItem",
    "UserSearchItem",
]
