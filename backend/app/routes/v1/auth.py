# backend/app/routes/v1/auth.py
"""
Authentication routes - API v1

Versioned auth endpoints under /api/v1/auth.

Endpoints:
    POST /signup               → Create a credentials account
    POST /login                → OAuth2 password login, returns a bearer token
    GET /lock                  → Lockout status for an email
    POST /dev/upsert-user      → Development-only user upsert
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm

from ...api.dependencies.services import get_auth_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...schemas.auth import (
    DevUpsertUserRequest,
    DevUpsertUserResponse,
    LockStatusResponse,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["auth-v1"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SignupResponse:
    """
    Register a new user with email and password.

    Raises:
        HTTPException: 400 on invalid input, 409 when the email is taken
    """
    try:
        await asyncio.to_thread(auth_service.signup, payload.email, payload.password)
        return SignupResponse(ok=True)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Unexpected error during signup: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Error creating user", "code": "AUTH_UNEXPECTED_ERROR"},
        )


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Login with the OAuth2 password form (``username`` is the email).

    Raises:
        HTTPException: 401 on bad credentials, 429 while the account is locked
    """
    try:
        result = await asyncio.to_thread(auth_service.login, form_data.username, form_data.password)
        return TokenResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Login failed", "code": "AUTH_UNEXPECTED_ERROR"},
        )


@router.get("/lock", response_model=LockStatusResponse)
async def lock_status(
    email: Optional[str] = Query(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> LockStatusResponse:
    """Whether the account is locked and for how many more seconds."""
    try:
        result = await asyncio.to_thread(auth_service.lock_status, email)
        return LockStatusResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error reading lock status: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read lock status",
        )


@router.post("/dev/upsert-user", response_model=DevUpsertUserResponse)
async def dev_upsert_user(
    payload: DevUpsertUserRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> DevUpsertUserResponse:
    """Create or reset a user's password. Only available in development."""
    try:
        result = await asyncio.to_thread(
            auth_service.dev_upsert_user, payload.email, payload.password, payload.id
        )
        return DevUpsertUserResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error upserting dev user: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upsert user",
        )
