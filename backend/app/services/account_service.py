# backend/app/services/account_service.py
"""
Account Service for the festival archive.

Profile edits (nickname, bio, Letterboxd id), onboarding terms and account
deletion for the signed-in user.
"""

from datetime import datetime, timezone
import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.constants import (
    LETTERBOXD_ID_PATTERN,
    MAX_BIO_LENGTH,
    MAX_NICKNAME_LENGTH,
    MIN_NICKNAME_LENGTH,
    NICKNAME_PATTERN,
)
from ..core.exceptions import ConflictException, ValidationException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

_NICKNAME_RE = re.compile(NICKNAME_PATTERN)
_LETTERBOXD_RE = re.compile(LETTERBOXD_ID_PATTERN)


def validate_nickname(nickname: Optional[str]) -> str:
    """
    Trim and check a nickname's length and characters.

    Raises:
        ValidationException: with a user-facing message
    """
    value = (nickname or "").strip()
    if len(value) < MIN_NICKNAME_LENGTH or len(value) > MAX_NICKNAME_LENGTH:
        raise ValidationException(
            f"닉네임은 {MIN_NICKNAME_LENGTH}~{MAX_NICKNAME_LENGTH}자 사이여야 합니다.",
            code="INVALID_NICKNAME_LENGTH",
        )
    if not _NICKNAME_RE.match(value):
        raise ValidationException(
            "영문, 한글, 숫자, ., -, _ 만 사용 가능합니다.", code="INVALID_NICKNAME_CHARS"
        )
    return value


class AccountService(BaseService):
    """Service for the signed-in user's own account."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.like_repository = RepositoryFactory.create_entry_like_repository(db)
        self.entry_repository = RepositoryFactory.create_user_entry_repository(db)

    @staticmethod
    def serialize_me(user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "email": user.email,
            "nickname": user.nickname,
            "bio": user.bio,
            "letterboxd_id": user.letterboxd_id,
            "terms_accepted_at": user.terms_accepted_at,
            "needs_onboarding": user.needs_onboarding,
            "created_at": user.created_at,
        }

    @BaseService.measure_operation("get_me")
    def me(self, user: User) -> Dict[str, Any]:
        return self.serialize_me(user)

    def _ensure_nickname_free(self, user: User, nickname: str) -> None:
        if self.user_repository.nickname_taken(nickname, exclude_user_id=user.id):
            raise ConflictException("이미 사용 중인 닉네임입니다.", code="NICKNAME_TAKEN")

    @BaseService.measure_operation("check_nickname")
    def check_nickname(self, user: User, nickname: Optional[str]) -> Dict[str, Any]:
        """``{available, message}`` without raising."""
        try:
            value = validate_nickname(nickname)
            self._ensure_nickname_free(user, value)
        except (ValidationException, ConflictException) as e:
            return {"available": False, "message": e.message}
        return {"available": True, "message": "사용 가능한 닉네임입니다."}

    @BaseService.measure_operation("update_nickname")
    def update_nickname(self, user: User, nickname: Optional[str]) -> Dict[str, Any]:
        value = validate_nickname(nickname)
        self._ensure_nickname_free(user, value)
        with self.transaction():
            user.nickname = value
            self.db.flush()
        self.log_operation("update_nickname", user_id=user.id, nickname=value)
        return self.serialize_me(user)

    @BaseService.measure_operation("update_profile")
    def update_profile(
        self,
        user: User,
        nickname: Optional[str] = None,
        bio: Optional[str] = None,
        letterboxd_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Update the provided profile fields.

        An empty ``letterboxd_id`` clears it; ``bio`` is trimmed and an empty
        one is stored as null.
        """
        new_nickname = None
        if nickname is not None:
            new_nickname = validate_nickname(nickname)
            self._ensure_nickname_free(user, new_nickname)

        new_bio = None
        if bio is not None:
            new_bio = bio.strip()
            if len(new_bio) > MAX_BIO_LENGTH:
                raise ValidationException(
                    f"bio must be at most {MAX_BIO_LENGTH} characters", code="BIO_TOO_LONG"
                )

        new_letterboxd = None
        if letterboxd_id is not None:
            new_letterboxd = letterboxd_id.strip()
            if new_letterboxd and not _LETTERBOXD_RE.match(new_letterboxd):
                raise ValidationException("invalid letterboxd id", code="INVALID_LETTERBOXD_ID")

        with self.transaction():
            if new_nickname is not None:
                user.nickname = new_nickname
            if new_bio is not None:
                user.bio = new_bio or None
            if new_letterboxd is not None:
                user.letterboxd_id = new_letterboxd or None
            self.db.flush()

        self.log_operation("update_profile", user_id=user.id)
        return self.serialize_me(user)

    @BaseService.measure_operation("agree_to_terms")
    def agree_to_terms(self, user: User) -> Dict[str, Any]:
        if user.terms_accepted_at is None:
            with self.transaction():
                user.terms_accepted_at = datetime.now(timezone.utc)
                self.db.flush()
        return self.serialize_me(user)

    @BaseService.measure_operation("delete_account")
    def delete_account(self, user: User) -> None:
        """
        Delete the account and everything it owns.

        Like counters on other users' entries drop first; the rows themselves
        go through ON DELETE CASCADE.
        """
        user_id = user.id
        with self.transaction():
            for entry in self.like_repository.entries_liked_by(user_id):
                if entry.user_id != user_id:
                    self.entry_repository.adjust_like_count(entry, -1)
            self.user_repository.delete(user_id)
        self.log_operation("delete_account", user_id=user_id)
