# backend/app/api/dependencies/auth.py
"""
Authentication dependencies that resolve the signed-in User.

The token is decoded by ``app.auth``; the user lookup runs in a worker
thread so the event loop is not blocked by the database.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import (
    get_current_user as auth_get_current_user,
    get_current_user_optional as auth_get_current_user_optional,
)
from ...models.user import User
from ...repositories.user_repository import UserRepository
from .database import get_db

logger = logging.getLogger(__name__)


def _load_user(db: Session, email: str) -> Optional[User]:
    return UserRepository(db).get_by_email(email)


async def get_current_user(
    current_user_email: str = Depends(auth_get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user.

    Raises:
        HTTPException: 401 if the token names no active user
    """
    user = await asyncio.to_thread(_load_user, db, current_user_email)
    if user is None or not user.is_active:
        logger.warning(f"Token for unknown or inactive user: {current_user_email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_user_optional(
    current_user_email: Optional[str] = Depends(auth_get_current_user_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Get the current user if a valid token was sent, otherwise None."""
    if not current_user_email:
        return None
    user = await asyncio.to_thread(_load_user, db, current_user_email)
    if user is None or not user.is_active:
        return None
    return user
