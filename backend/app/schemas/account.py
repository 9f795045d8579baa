"""Schemas for the signed-in user's account and profile."""

from datetime import datetime
from typing import Optional

from ._strict_base import StrictModel, StrictRequestModel


class MeResponse(StrictModel):
    id: str
    email: str
    nickname: Optional[str] = None
    bio: Optional[str] = None
    letterboxd_id: Optional[str] = None
    terms_accepted_at: Optional[datetime] = None
    needs_onboarding: bool
    created_at: datetime


class NicknameUpdateRequest(StrictRequestModel):
    nickname: Optional[str] = None


class NicknameCheckResponse(StrictModel):
    available: bool
    message: str


class ProfileUpdateRequest(StrictRequestModel):
    nickname: Optional[str] = None
    bio: Optional[str] = None
    letterboxd_id: Optional[str] = None
