"""Failed-login bookkeeping used for temporary account lockouts."""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class LoginAttempt(Base):
    """Failure counter per email; ``locked_until`` is set once the threshold is hit."""

    __tablename__ = "login_attempts"

    email: Mapped[str] = mapped_column(String(255), primary_key=True)
    fail_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<LoginAttempt(email={self.email}, fail_count={self.fail_count})>"
