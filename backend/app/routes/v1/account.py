# backend/app/routes/v1/account.py
"""
Account routes - API v1

The signed-in user's own account under /api/v1/account.

Endpoints:
    GET /me                  → Profile of the current user
    PUT /nickname            → Change nickname
    GET /nickname/check      → Nickname availability
    PATCH /profile           → Update nickname / bio / letterboxd id
    POST /terms              → Accept the terms (finishes onboarding)
    DELETE /                 → Delete the account and everything it owns
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_account_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.account import (
    MeResponse,
    NicknameCheckResponse,
    NicknameUpdateRequest,
    ProfileUpdateRequest,
)
from ...services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["account-v1"])


@router.get("/me", response_model=MeResponse)
async def read_me(
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> MeResponse:
    return MeResponse(**account_service.me(current_user))


@router.put("/nickname", response_model=MeResponse)
async def update_nickname(
    payload: NicknameUpdateRequest,
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> MeResponse:
    try:
        result = await asyncio.to_thread(account_service.update_nickname, current_user, payload.nickname)
        return MeResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error updating nickname for {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update nickname"
        )


@router.get("/nickname/check", response_model=NicknameCheckResponse)
async def check_nickname(
    nickname: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> NicknameCheckResponse:
    """Availability check; invalid nicknames come back as unavailable with a message."""
    try:
        result = await asyncio.to_thread(account_service.check_nickname, current_user, nickname)
        return NicknameCheckResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error checking nickname: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to check nickname"
        )


@router.patch("/profile", response_model=MeResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> MeResponse:
    try:
        result = await asyncio.to_thread(
            account_service.update_profile,
            current_user,
            nickname=payload.nickname,
            bio=payload.bio,
            letterboxd_id=payload.letterboxd_id,
        )
        return MeResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error updating profile for {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update profile"
        )


@router.post("/terms", response_model=MeResponse)
async def agree_to_terms(
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> MeResponse:
    try:
        result = await asyncio.to_thread(account_service.agree_to_terms, current_user)
        return MeResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error accepting terms for {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to accept terms"
        )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    current_user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> Response:
    """Delete the account; entries, likes, favorites and social edges go with it."""
    try:
        await asyncio.to_thread(account_service.delete_account, current_user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error deleting account {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete account"
        )
