# backend/app/routes/v1/reviews.py
"""
Reviews routes - API v1

The social side of film entries under /api/v1/reviews.

Endpoints:
    GET /films/{film_id}     → Other users' visible entries for a film
    POST /{entry_id}/like    → Toggle my like on a review
    GET /feed                → Entries of users I follow, keyset paginated
"""

import asyncio
from datetime import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_current_user, get_current_user_optional
from ...api.dependencies.services import get_review_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.user_entry import FeedResponse, LikeToggleResponse, SocialReviewItem
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews-v1"])


@router.get("/films/{film_id}", response_model=List[SocialReviewItem])
async def get_film_reviews(
    film_id: str = Path(..., min_length=1, max_length=128),
    current_user: Optional[User] = Depends(get_current_user_optional),
    review_service: ReviewService = Depends(get_review_service),
) -> List[SocialReviewItem]:
    """Most liked first; fields hidden by the author's privacy settings are null."""
    try:
        items = await asyncio.to_thread(
            review_service.social_reviews, current_user.id if current_user else None, film_id
        )
        return [SocialReviewItem(**item) for item in items]
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error loading reviews for film {film_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load reviews"
        )


@router.post("/{entry_id}/like", response_model=LikeToggleResponse)
async def toggle_review_like(
    entry_id: str = Path(..., min_length=1, max_length=64),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> LikeToggleResponse:
    """
    Like or unlike a review.

    Raises:
        HTTPException: 404 for unknown entries, 422 when the entry has no review
    """
    try:
        result = await asyncio.to_thread(review_service.toggle_like, current_user.id, entry_id)
        return LikeToggleResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error toggling like on {entry_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update like"
        )


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    cursor_updated_at: Optional[datetime] = Query(None),
    cursor_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> FeedResponse:
    """Pass ``next_cursor`` of the previous page as ``cursor_updated_at`` / ``cursor_id``."""
    try:
        result = await asyncio.to_thread(
            review_service.get_feed,
            current_user.id,
            cursor_updated_at=cursor_updated_at,
            cursor_id=cursor_id,
        )
        return FeedResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error loading feed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load feed"
        )
