# backend/app/routes/v1/users.py
"""
Users routes - API v1

People search, public profiles and the follow / block graph under /api/v1/users.

Endpoints:
    GET /search?q=                 → Nickname search (signed in)
    GET /blocked                   → Users I have blocked
    GET /{user_id}                 → Public profile
    GET /{user_id}/ratings         → Ratings the owner's privacy lets me see
    GET /{user_id}/followers       → Followers of the user
    GET /{user_id}/following       → Users the user follows
    POST /{user_id}/follow         → Toggle following
    POST /{user_id}/block          → Toggle blocking
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_current_user, get_current_user_optional
from ...api.dependencies.services import get_social_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.social import (
    BlockedUserItem,
    BlockToggleResponse,
    FollowListItem,
    FollowToggleResponse,
    UserProfileResponse,
    UserRatingItem,
    UserSearchItem,
)
from ...services.social_service import SocialService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


async def _call(action: str, func: Callable[..., Any], *args: Any) -> Any:
    try:
        return await asyncio.to_thread(func, *args)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error during {action}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
        )


def _viewer_id(user: Optional[User]) -> Optional[str]:
    return user.id if user else None


@router.get("/search", response_model=List[UserSearchItem])
async def search_users(
    q: Optional[str] = Query(None, max_length=50),
    current_user: User = Depends(get_current_user),
    social_service: SocialService = Depends(get_social_service),
) -> List[UserSearchItem]:
    """Up to 10 users whose nickname contains ``q``; blank queries return nothing."""
    items = await _call("search users", social_service.search_users, current_user.id, q)
    return [UserSearchItem(**item) for item in items]


@router.get("/blocked", response_model=List[BlockedUserItem])
async def list_blocked_users(
    current_user: User = Depends(get_current_user),
    social_service: SocialService = Depends(get_social_service),
) -> List[BlockedUserItem]:
    items = await _call("load blocked users", social_service.get_blocked_users, current_user.id)
    return [BlockedUserItem(**item) for item in items]


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: Optional[User] = Depends(get_current_user_optional),
    social_service: SocialService = Depends(get_social_service),
) -> UserProfileResponse:
    result = await _call(
        "load profile", social_service.get_user_profile, _viewer_id(current_user), user_id
    )
    return UserProfileResponse(**result)


@router.get("/{user_id}/ratings", response_model=List[UserRatingItem])
async def get_user_ratings(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: Optional[User] = Depends(get_current_user_optional),
    social_service: SocialService = Depends(get_social_service),
) -> List[UserRatingItem]:
    items = await _call(
        "load ratings", social_service.get_user_ratings, _viewer_id(current_user), user_id
    )
    return [UserRatingItem(**item) for item in items]


@router.get("/{user_id}/followers", response_model=List[FollowListItem])
async def get_followers(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: Optional[User] = Depends(get_current_user_optional),
    social_service: SocialService = Depends(get_social_service),
) -> List[FollowListItem]:
    items = await _call(
        "load followers", social_service.get_follow_list, _viewer_id(current_user), user_id, "followers"
    )
    return [FollowListItem(**item) for item in items]


@router.get("/{user_id}/following", response_model=List[FollowListItem])
async def get_following(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: Optional[User] = Depends(get_current_user_optional),
    social_service: SocialService = Depends(get_social_service),
) -> List[FollowListItem]:
    items = await _call(
        "load following", social_service.get_follow_list, _viewer_id(current_user), user_id, "following"
    )
    return [FollowListItem(**item) for item in items]


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: User = Depends(get_current_user),
    social_service: SocialService = Depends(get_social_service),
) -> FollowToggleResponse:
    result = await _call("update follow", social_service.toggle_follow, current_user.id, user_id)
    return FollowToggleResponse(**result)


@router.post("/{user_id}/block", response_model=BlockToggleResponse)
async def toggle_block(
    user_id: str = Path(..., min_length=1, max_length=64),
    current_user: User = Depends(get_current_user),
    social_service: SocialService = Depends(get_social_service),
) -> BlockToggleResponse:
    result = await _call("update block", social_service.toggle_block, current_user.id, user_id)
    return BlockToggleResponse(**result)
