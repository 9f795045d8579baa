# backend/app/repositories/login_attempt_repository.py
"""Failed-login counters keyed by normalized email."""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.login_attempt import LoginAttempt
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LoginAttemptRepository(BaseRepository[LoginAttempt]):
    """Repository for LoginAttempt rows."""

    def __init__(self, db: Session):
        super().__init__(db, LoginAttempt)
        self.logger = logging.getLogger(__name__)

    def get_for_email(self, email: str) -> Optional[LoginAttempt]:
        return self.get_by_id(email)

    def record_failure(self, email: str, locked_until: Optional[datetime] = None) -> LoginAttempt:
        """Bump the failure counter and optionally start a lockout."""
        row = self.get_for_email(email)
        if row is None:
            return self.create(email=email, fail_count=1, locked_until=locked_until)
        try:
            row.fail_count = (row.fail_count or 0) + 1
            if locked_until is not None:
                row.locked_until = locked_until
            self.db.flush()
            return row
        except SQLAlchemyError as e:
            self.logger.error(f"Error recording login failure: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to record login failure: {str(e)}")

    def reset(self, email: str) -> None:
        try:
            row = self.get_for_email(email)
            if row is not None:
                self.db.delete(row)
                self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error resetting login failures: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to reset login failures: {str(e)}")
