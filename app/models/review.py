"""
Review model: a rating and comment left by a user on a listing.
"""

from sqlalchemy import Integer, Text, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.listing import Listing
    from app.models.user import User

MIN_RATING = 1
MAX_RATING = 5


class Review(Base):
    """Review of a listing written by an authenticated user."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint(f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}", name="ck_reviews_rating_range"),
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    comment: Mapped[str] = mapped_column(Text, nullable=False)

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    listing: Mapped["Listing"] = relationship(
        "Listing",
        back_populates="reviews",
        lazy="noload"
    )

    author: Mapped["User"] = relationship(
        "User",
        back_populates="reviews",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, listing_id={self.listing_id}, rating={self.rating})>"

    def validate_rating(self) -> None:
        if self.rating is None or not (MIN_RATING <= self.rating <= MAX_RATING):
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

    def to_dict(self, include_author: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "rating": self.rating,
            "comment": self.comment,
            "listing_id": str(self.listing_id),
            "author_id": str(self.author_id),
            "created_at": self.created_at.isoformat(),
        }
        if include_author and self.author:
            result["author"] = self.author.to_dict()
        return result
