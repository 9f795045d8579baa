# backend/app/routes/v1/privacy.py
"""
Privacy routes - API v1

Who may see the current user's ratings and reviews, under /api/v1/privacy.

Endpoints:
    GET /    → Current settings (private/private when never saved)
    PUT /    → Update ratingVisibility and/or reviewVisibility
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_privacy_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.privacy import PrivacySettingsResponse, PrivacyUpdateRequest
from ...services.privacy_service import PrivacyService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["privacy-v1"])


@router.get("", response_model=PrivacySettingsResponse)
async def get_privacy_settings(
    current_user: User = Depends(get_current_user),
    privacy_service: PrivacyService = Depends(get_privacy_service),
) -> PrivacySettingsResponse:
    try:
        result = await asyncio.to_thread(privacy_service.get_settings, current_user.id)
        return PrivacySettingsResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error loading privacy settings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load privacy settings"
        )


@router.put("", response_model=PrivacySettingsResponse)
async def update_privacy_settings(
    payload: PrivacyUpdateRequest,
    current_user: User = Depends(get_current_user),
    privacy_service: PrivacyService = Depends(get_privacy_service),
) -> PrivacySettingsResponse:
    """
    Update visibility settings.

    Raises:
        HTTPException: 400 for an unknown visibility or an empty update
    """
    try:
        result = await asyncio.to_thread(
            privacy_service.update_settings,
            current_user.id,
            rating_visibility=payload.rating_visibility,
            review_visibility=payload.review_visibility,
        )
        return PrivacySettingsResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error updating privacy settings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update privacy settings"
        )
