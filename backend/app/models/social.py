"""Follow and block edges between users."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import TIMESTAMP, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .user import User


class Follow(Base):
    """Directed edge: ``follower`` follows ``following``."""

    __tablename__ = "follows"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    follower_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    following_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    follower: Mapped["User"] = relationship("User", foreign_keys=[follower_id], back_populates="following")
    following: Mapped["User"] = relationship("User", foreign_keys=[following_id], back_populates="followers")

    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="unique_follow_edge"),)

    def __repr__(self) -> str:
        return f"<Follow(follower={self.follower_id}, following={self.following_id})>"


class Block(Base):
    """Directed edge: ``blocker`` has blocked ``blocked``."""

    __tablename__ = "blocks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    blocker_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    blocked_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    blocker: Mapped["User"] = relationship("User", foreign_keys=[blocker_id], back_populates="blocks_made")
    blocked: Mapped["User"] = relationship("User", foreign_keys=[blocked_id], back_populates="blocks_received")

    __table_args__ = (UniqueConstraint("blocker_id", "blocked_id", name="unique_block_edge"),)

    def __repr__(self) -> str:
        return f"<Block(blocker={self.blocker_id}, blocked={self.blocked_id})>"
