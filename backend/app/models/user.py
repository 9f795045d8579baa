# backend/app/models/user.py
"""
User model for the festival archive.

A user signs in with email and password, carries a unique public nickname,
and owns film entries (ratings and reviews), favorite screenings, privacy
settings and follow/block edges. Every owned row cascades on account deletion.

Classes:
    User: Main user model for authentication and profile management
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import TIMESTAMP, Boolean, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .favorite_screening import FavoriteScreening
    from .privacy import UserPrivacy
    from .social import Block, Follow
    from .user_entry import EntryLike, UserEntry


class User(Base):
    """
    Main user model for authentication and profile management.

    Attributes:
        id: ULID primary key
        email: Unique, lower-cased email address used for login
        hashed_password: Bcrypt hash (null for accounts created without a password)
        nickname: Unique public handle, generated on first sign-in when missing
        bio: Short profile text
        letterboxd_id: Optional Letterboxd username shown on the profile
        terms_accepted_at: When onboarding terms were accepted (null until then)
        is_active: Whether the account may sign in
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    nickname: Mapped[Optional[str]] = mapped_column(String(20), unique=True, index=True, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    letterboxd_id: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    terms_accepted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships (all owned rows go away with the account)
    entries: Mapped[List["UserEntry"]] = relationship(
        "UserEntry", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    likes: Mapped[List["EntryLike"]] = relationship(
        "EntryLike", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    favorite_screenings: Mapped[List["FavoriteScreening"]] = relationship(
        "FavoriteScreening", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    privacy: Mapped[Optional["UserPrivacy"]] = relationship(
        "UserPrivacy", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    following: Mapped[List["Follow"]] = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    followers: Mapped[List["Follow"]] = relationship(
        "Follow",
        foreign_keys="Follow.following_id",
        back_populates="following",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    blocks_made: Mapped[List["Block"]] = relationship(
        "Block",
        foreign_keys="Block.blocker_id",
        back_populates="blocker",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    blocks_received: Mapped[List["Block"]] = relationship(
        "Block",
        foreign_keys="Block.blocked_id",
        back_populates="blocked",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def needs_onboarding(self) -> bool:
        return self.terms_accepted_at is None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, nickname={self.nickname})>"
