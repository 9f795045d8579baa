"""Per-user privacy settings for ratings and reviews."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import TIMESTAMP, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.constants import VISIBILITY_PRIVATE
from ..database import Base

if TYPE_CHECKING:
    from .user import User


class UserPrivacy(Base):
    """Visibility of a user's ratings and reviews: private, friends or public."""

    __tablename__ = "user_privacy"

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    rating_visibility: Mapped[str] = mapped_column(String(10), nullable=False, default=VISIBILITY_PRIVATE)
    review_visibility: Mapped[str] = mapped_column(String(10), nullable=False, default=VISIBILITY_PRIVATE)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="privacy")

    def __repr__(self) -> str:
        return (
            f"<UserPrivacy(user={self.user_id}, rating={self.rating_visibility}, "
            f"review={self.review_visibility})>"
        )
