# backend/app/services/auth_service.py
"""
Authentication Service for the festival archive.

Handles credential signup, password login with account lockout, lock status
lookups, the development-only user upsert and nickname assignment. Follows
the service layer pattern to keep business logic out of routes.
"""

import logging
import random
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..auth import create_access_token, get_password_hash, verify_password
from ..core.config import settings
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import (
    AccountLockedException,
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)
from ..core.login_protection import AccountLockout, record_login_result
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

NICKNAME_PREFIX_LENGTH = 3
NICKNAME_MAX_ATTEMPTS = 50


def normalize_email(email: Optional[str]) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(self, db: Session, lockout: Optional[AccountLockout] = None) -> None:
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.lockout = lockout or AccountLockout(db)

    # ── Nicknames ─────────────────────────────────────────────────

    def generate_nickname(self, email: str) -> str:
        """
        First three characters of the email's local part (padded with "0")
        followed by a random four-digit suffix, retried until unused.
        """
        prefix = email.split("@")[0][:NICKNAME_PREFIX_LENGTH].ljust(NICKNAME_PREFIX_LENGTH, "0")
        for _ in range(NICKNAME_MAX_ATTEMPTS):
            candidate = f"{prefix}{random.randint(1000, 9999)}"
            if not self.user_repository.nickname_taken(candidate):
                return candidate
        raise ConflictException("Could not allocate a nickname", code="NICKNAME_EXHAUSTED")

    @BaseService.measure_operation("ensure_nickname")
    def ensure_nickname(self, user: User) -> str:
        """Assign a generated nickname when the user has none; returns the nickname."""
        if user.nickname:
            return user.nickname
        with self.transaction():
            user.nickname = self.generate_nickname(user.email)
            self.db.flush()
        self.log_operation("ensure_nickname", user_id=user.id, nickname=user.nickname)
        return user.nickname

    # ── Signup / login ────────────────────────────────────────────

    @BaseService.measure_operation("signup")
    def signup(self, email: Optional[str], password: Optional[str]) -> User:
        """
        Register a credential account.

        Raises:
            ValidationException: missing email or password shorter than the minimum
            ConflictException: email already registered
        """
        normalized = normalize_email(email)
        if not normalized or not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationException("Invalid signup input", code="INVALID_INPUT")

        if self.user_repository.get_by_email(normalized):
            self.logger.warning(f"Signup failed - email already exists: {normalized}")
            raise ConflictException("Email already registered", code="EMAIL_EXISTS")

        self.log_operation("signup", email=normalized)
        with self.transaction():
            user: User = self.user_repository.create(
                email=normalized,
                hashed_password=get_password_hash(password),
                nickname=self.generate_nickname(normalized),
            )
        return user

    @BaseService.measure_operation("login")
    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Verify credentials and issue an access token.

        Raises:
            AccountLockedException: too many recent failures (429 + Retry-After)
            UnauthorizedException: wrong email or password
        """
        normalized = normalize_email(email)
        if not normalized or not password:
            record_login_result("invalid")
            raise UnauthorizedException("Incorrect email or password", code="INVALID_CREDENTIALS")

        locked, remain = self.lockout.check_lockout(normalized)
        if locked:
            record_login_result("locked")
            raise AccountLockedException(remain)

        user = self.user_repository.get_by_email(normalized)
        if user is None or not user.is_active or not verify_password(password, user.hashed_password):
            with self.transaction():
                outcome = self.lockout.record_failure(normalized)
            record_login_result("invalid")
            if outcome["lockout_applied"]:
                raise AccountLockedException(outcome["remain"])
            raise UnauthorizedException("Incorrect email or password", code="INVALID_CREDENTIALS")

        with self.transaction():
            self.lockout.reset(normalized)
        self.ensure_nickname(user)
        record_login_result("success")
        self.log_operation("login", user_id=user.id)

        return {
            "access_token": create_access_token(data={"sub": user.email}),
            "token_type": "bearer",
        }

    @BaseService.measure_operation("lock_status")
    def lock_status(self, email: Optional[str]) -> Dict[str, Any]:
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationException("email is required", code="EMAIL_REQUIRED")
        return self.lockout.lock_status(normalized)

    # ── Development helpers ───────────────────────────────────────

    @BaseService.measure_operation("dev_upsert_user")
    def dev_upsert_user(
        self, email: Optional[str], password: Optional[str], user_id: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Create or re-password a user; development environment only.

        ``user_id`` pins the id of a newly created user.
        """
        if settings.environment != "development":
            raise ForbiddenException("forbidden", code="DEV_ONLY")

        normalized = normalize_email(email)
        if not normalized or not password:
            raise ValidationException("email/password required", code="INVALID_INPUT")

        hashed = get_password_hash(password)
        with self.transaction():
            user = self.user_repository.get_by_email(normalized)
            if user is not None:
                user.hashed_password = hashed
                self.db.flush()
            else:
                fields: Dict[str, Any] = {
                    "email": normalized,
                    "hashed_password": hashed,
                    "nickname": self.generate_nickname(normalized),
                }
                if user_id:
                    fields["id"] = user_id
                user = self.user_repository.create(**fields)
        return {"id": user.id, "email": user.email}
