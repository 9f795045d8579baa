"""Account lockout after repeated failed logins, stored in ``login_attempts``."""

from datetime import datetime, timedelta, timezone
import logging
import math
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .config import settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def record_login_result(result: str) -> None:
    """Count a login outcome: success | invalid | locked."""
    prometheus_metrics.inc_login_attempt(result)


class AccountLockout:
    """
    Fixed-window lockout: ``max_failures`` bad passwords lock the email for
    ``lockout_minutes``. A failure after an expired lock starts a new count.

    Callers own the transaction; this class only flushes.
    """

    def __init__(
        self,
        db: Session,
        *,
        max_failures: Optional[int] = None,
        lockout_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = RepositoryFactory.create_login_attempt_repository(db)
        self.max_failures = max_failures or settings.login_max_failures
        self.lockout = timedelta(minutes=lockout_minutes or settings.login_lockout_minutes)
        self.clock = clock

    def _remaining_seconds(self, locked_until: Optional[datetime]) -> int:
        if locked_until is None:
            return 0
        delta = (_as_utc(locked_until) - self.clock()).total_seconds()
        if delta <= 0:
            return 0
        return max(1, math.ceil(delta))

    def lock_status(self, email: str) -> Dict[str, Any]:
        """``{locked, remain, count}``; ``remain`` is whole seconds left."""
        row = self.repository.get_for_email(email)
        if row is None:
            return {"locked": False, "remain": 0, "count": 0}
        remain = self._remaining_seconds(row.locked_until)
        return {"locked": remain > 0, "remain": remain, "count": row.fail_count or 0}

    def check_lockout(self, email: str) -> Tuple[bool, int]:
        """Return (locked, seconds remaining)."""
        status = self.lock_status(email)
        return status["locked"], status["remain"]

    def record_failure(self, email: str) -> Dict[str, Any]:
        """
        Record a failed login and lock the account once the threshold is hit.

        Returns:
            dict with the failure count and whether a lock was applied
        """
        row = self.repository.get_for_email(email)
        if row is not None and row.locked_until is not None and self._remaining_seconds(row.locked_until) == 0:
            self.repository.reset(email)
            row = None

        failures = (row.fail_count if row else 0) + 1
        locked_until = self.clock() + self.lockout if failures >= self.max_failures else None
        self.repository.record_failure(email, locked_until=locked_until)

        if locked_until is not None:
            logger.warning(f"Account locked after {failures} failed logins: {email}")
            return {"failures": failures, "lockout_applied": True, "remain": self._remaining_seconds(locked_until)}
        return {"failures": failures, "lockout_applied": False}

    def reset(self, email: str) -> None:
        """Clear failure counters on successful login."""
        self.repository.reset(email)
