"""Favorite screening markers (the hearts that build a user's timetable)."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import TIMESTAMP, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .user import User


class FavoriteScreening(Base):
    """
    A screening the user wants to attend.

    ``priority`` cycles through 0/1/2 on the timetable (null = not set);
    ``sort_order`` keeps the user's manual ordering inside an overlap group.
    """

    __tablename__ = "favorite_screenings"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    screening_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    priority: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="favorite_screenings")

    __table_args__ = (UniqueConstraint("user_id", "screening_id", name="unique_user_favorite_screening"),)

    def __repr__(self) -> str:
        return f"<FavoriteScreening(user={self.user_id}, screening={self.screening_id})>"
