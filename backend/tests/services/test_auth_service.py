"""Signup, login with lockout, and the development user upsert."""

from datetime import datetime, timedelta, timezone
import re

import pytest

from app.auth import decode_access_token, verify_password
from app.core.config import settings
from app.core.exceptions import (
    AccountLockedException,
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)
from app.core.login_protection import AccountLockout
from app.models.user import User
from app.services.auth_service import AuthService


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lockout(db, clock):
    return AccountLockout(db, max_failures=5, lockout_minutes=15, clock=clock)


@pytest.fixture
def auth_service(db, lockout):
    return AuthService(db, lockout=lockout)


class TestAccountLockout:
    def test_unknown_email_is_unlocked(self, lockout):
        assert lockout.lock_status("nobody@example.com") == {"locked": False, "remain": 0, "count": 0}

    def test_fifth_failure_locks(self, lockout):
        for expected in range(1, 5):
            outcome = lockout.record_failure("a@example.com")
            assert outcome == {"failures": expected, "lockout_applied": False}

        outcome = lockout.record_failure("a@example.com")

        assert outcome["lockout_applied"] is True
        assert outcome["remain"] == 15 * 60
        assert lockout.check_lockout("a@example.com") == (True, 900)

    def test_lock_expires_and_count_restarts(self, lockout, clock):
        for _ in range(5):
            lockout.record_failure("a@example.com")

        clock.advance(minutes=10)
        status = lockout.lock_status("a@example.com")
        assert status["locked"] is True
        assert status["remain"] == 5 * 60

        clock.advance(minutes=5, seconds=1)
        assert lockout.check_lockout("a@example.com") == (False, 0)

        outcome = lockout.record_failure("a@example.com")
        assert outcome == {"failures": 1, "lockout_applied": False}

    def test_reset_clears_counter(self, lockout):
        lockout.record_failure("a@example.com")
        lockout.reset("a@example.com")
        assert lockout.lock_status("a@example.com")["count"] == 0


class TestSignup:
    def test_signup_normalizes_email_and_assigns_nickname(self, db, auth_service):
        user = auth_service.signup("  New.User@Example.com ", "longenough")

        assert user.email == "new.user@example.com"
        assert re.fullmatch(r"new\d{4}", user.nickname)
        assert verify_password("longenough", user.hashed_password)
        assert db.query(User).filter(User.email == "new.user@example.com").count() == 1

    @pytest.mark.parametrize(
        "email,password",
        [("", "longenough"), (None, "longenough"), ("a@example.com", "short"), ("a@example.com", None)],
    )
    def test_signup_rejects_invalid_input(self, auth_service, email, password):
        with pytest.raises(ValidationException) as exc_info:
            auth_service.signup(email, password)
        assert exc_info.value.code == "INVALID_INPUT"

    def test_signup_rejects_existing_email(self, auth_service, test_user):
        with pytest.raises(ConflictException) as exc_info:
            auth_service.signup("TEST.VIEWER@example.com", "longenough")
        assert exc_info.value.code == "EMAIL_EXISTS"

    def test_generated_nickname_pads_short_local_part(self, auth_service):
        assert re.fullmatch(r"ab0\d{4}", auth_service.generate_nickname("ab@example.com"))


class TestLogin:
    def test_login_returns_token(self, auth_service, test_user, test_password):
        result = auth_service.login("Test.Viewer@example.com", test_password)

        assert result["token_type"] == "bearer"
        assert decode_access_token(result["access_token"])["sub"] == test_user.email

    def test_wrong_password_counts_failure(self, auth_service, test_user):
        with pytest.raises(UnauthorizedException) as exc_info:
            auth_service.login(test_user.email, "wrong-password")

        assert exc_info.value.code == "INVALID_CREDENTIALS"
        assert auth_service.lock_status(test_user.email)["count"] == 1

    def test_unknown_email_is_invalid_credentials(self, auth_service):
        with pytest.raises(UnauthorizedException):
            auth_service.login("ghost@example.com", "whatever1")

    def test_lockout_blocks_even_correct_password(self, auth_service, test_user, test_password):
        for _ in range(4):
            with pytest.raises(UnauthorizedException):
                auth_service.login(test_user.email, "wrong-password")

        with pytest.raises(AccountLockedException) as exc_info:
            auth_service.login(test_user.email, "wrong-password")
        assert exc_info.value.details == {"remain": 900}

        with pytest.raises(AccountLockedException):
            auth_service.login(test_user.email, test_password)

        http_exc = exc_info.value.to_http_exception()
        assert http_exc.status_code == 429
        assert http_exc.headers == {"Retry-After": "900"}

    def test_lockout_lifts_after_window(self, auth_service, clock, test_user, test_password):
        for _ in range(5):
            with pytest.raises((UnauthorizedException, AccountLockedException)):
                auth_service.login(test_user.email, "wrong-password")

        clock.advance(minutes=16)
        auth_service.login(test_user.email, test_password)

        assert auth_service.lock_status(test_user.email) == {"locked": False, "remain": 0, "count": 0}

    def test_login_assigns_missing_nickname(self, db, auth_service, test_user, test_password):
        test_user.nickname = None
        db.commit()

        auth_service.login(test_user.email, test_password)

        db.refresh(test_user)
        assert re.fullmatch(r"tes\d{4}", test_user.nickname)

    def test_lock_status_requires_email(self, auth_service):
        with pytest.raises(ValidationException):
            auth_service.lock_status("  ")


class TestDevUpsert:
    def test_creates_user_with_pinned_id(self, db, auth_service):
        result = auth_service.dev_upsert_user("Dev@Example.com", "devpass12", user_id="dev-user-1")

        assert result == {"id": "dev-user-1", "email": "dev@example.com"}
        assert db.get(User, "dev-user-1") is not None

    def test_repasswords_existing_user(self, auth_service, test_user):
        result = auth_service.dev_upsert_user(test_user.email, "brand-new-pass")

        assert result["id"] == test_user.id
        assert auth_service.login(test_user.email, "brand-new-pass")["access_token"]

    def test_forbidden_outside_development(self, auth_service, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        with pytest.raises(ForbiddenException):
            auth_service.dev_upsert_user("dev@example.com", "devpass12")
