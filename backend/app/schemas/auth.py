"""Schemas for signup, login, lock status and the development user upsert."""

from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class SignupRequest(StrictRequestModel):
    """Credential signup; emptiness and length are checked by the service."""

    email: Optional[str] = None
    password: Optional[str] = None


class SignupResponse(StrictModel):
    ok: bool = True


class TokenResponse(StrictModel):
    access_token: str
    token_type: str = "bearer"


class LockStatusResponse(StrictModel):
    locked: bool
    remain: int = Field(description="Whole seconds until the lock expires")
    count: int = Field(description="Consecutive failed logins")


class DevUpsertUserRequest(StrictRequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    id: Optional[str] = Field(default=None, description="Id to use when the user is created")


class DevUpsertUserResponse(StrictModel):
    id: str
    email: str
