"""
ListingImage model for externally hosted listing images.
Stores the provider URL and identifier; the bytes live with the image host.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.listing import Listing


class ListingImage(Base):
    """
    An image exclusively owned by one listing.
    ``position`` orders the listing's image set; position 0 is the primary image.
    """

    __tablename__ = "listing_images"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the listing this image belongs to"
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Zero-based position in the listing's image set"
    )

    url: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Permanent URL assigned by the image host"
    )

    external_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Image host identifier used for deletion"
    )

    original_filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Filename supplied by the client, informational only"
    )

    listing: Mapped["Listing"] = relationship(
        "Listing",
        back_populates="images",
        lazy="noload"
    )

    def __repr__(self) -> str:
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, position={self.position})>"

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "external_id": self.external_id,
            "original_filename": self.original_filename,
        }


listing_images_position_index = Index(
    'idx_listing_images_listing_position',
    ListingImage.listing_id,
    ListingImage.position
)
