"""Per-user film entries (rating + short review) and likes on them."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import TIMESTAMP, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserEntry(Base):
    """
    One user's record for one catalog film.

    ``film_id`` references the static catalog, so it is not a foreign key.
    ``rating`` is 0.0-5.0 in 0.1 steps, null when the user only reviewed.
    ``like_count`` is denormalized from ``entry_likes`` and kept in step by
    the like toggle.
    """

    __tablename__ = "user_entries"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    film_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    rating: Mapped[Optional[float]] = mapped_column(Numeric(2, 1, asdecimal=False), nullable=True)
    short_review: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    # Python-side timestamps keep feed ordering stable at sub-second resolution
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="entries")
    likes: Mapped[List["EntryLike"]] = relationship(
        "EntryLike", back_populates="entry", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (UniqueConstraint("user_id", "film_id", name="unique_user_film_entry"),)

    @property
    def has_review(self) -> bool:
        return bool((self.short_review or "").strip())

    def __repr__(self) -> str:
        return f"<UserEntry(user={self.user_id}, film={self.film_id}, rating={self.rating})>"


class EntryLike(Base):
    """A user liking another user's review."""

    __tablename__ = "entry_likes"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_entry_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("user_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="likes")
    entry: Mapped["UserEntry"] = relationship("UserEntry", back_populates="likes")

    __table_args__ = (UniqueConstraint("user_id", "user_entry_id", name="unique_user_entry_like"),)

    def __repr__(self) -> str:
        return f"<EntryLike(user={self.user_id}, entry={self.user_entry_id})>"
