"""
Listing model for buy and rent property listings.
Handles listing data, geocoded coordinates, ordered image sets and ownership.
"""

from sqlalchemy import String, Text, Integer, Numeric, Float, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.config import get_settings
from app.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.image import ListingImage
    from app.models.review import Review

MIN_IMAGES_PER_LISTING = 1


def max_images_per_listing() -> int:
    """Upper bound of a listing's image set, shared with the upload limits."""
    return get_settings().max_images_per_listing


class ListingCategory(str, enum.Enum):
    """Whether the property is offered for sale or for rent."""
    BUY = "buy"
    RENT = "rent"


class Listing(Base):
    """
    Listing model for property records.
    The first element of ``images`` is the primary image shown in list views.
    """

    __tablename__ = "listings"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Free-text location used for geocoding"
    )

    country: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Country of the property"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Asking price or rent"
    )

    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    area: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Area in square feet")

    category: Mapped[Optional[ListingCategory]] = mapped_column(
        SQLEnum(ListingCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
        index=True,
        comment="buy or rent"
    )

    property_category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Free-form property category tag, e.g. apartment or villa"
    )

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered set of amenity labels"
    )

    # Geocoded point
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="listings",
        lazy="selectin"
    )

    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ListingImage.position"
    )

    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="listing",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Review.created_at"
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def primary_image(self) -> Optional["ListingImage"]:
        """The first image of the ordered image set."""
        return self.images[0] if self.images else None

    @property
    def geometry(self) -> dict:
        """GeoJSON point for the geocoded location."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    def validate_price(self) -> None:
        if self.price is None or self.price < 0:
            raise ValueError("Listing price cannot be negative")

    def validate_rooms(self) -> None:
        for name in ("bedrooms", "bathrooms", "area"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"Listing {name} cannot be negative")

    def validate_images(self) -> None:
        """
        Validate the image set size.

        Raises:
            ValueError: If the listing has no images or more than allowed
        """
        self.check_image_count(len(self.images))

    @staticmethod
    def check_image_count(count: int) -> None:
        limit = max_images_per_listing()
        if count < MIN_IMAGES_PER_LISTING:
            raise ValueError("A listing must have at least one image")
        if count > limit:
            raise ValueError(f"A listing cannot have more than {limit} images")

    def validate_coordinates(self) -> None:
        if self.latitude is None or self.longitude is None:
            raise ValueError("A listing requires geocoded coordinates")
        if not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90 degrees")
        if not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180 degrees")

    def validate_all(self) -> None:
        """
        Run all validation checks on the listing.

        Raises:
            ValueError: If any validation fails
        """
        self.validate_price()
        self.validate_rooms()
        self.validate_images()
        self.validate_coordinates()

    def validate_changes(self, changes: dict, image_count: int) -> None:
        """
        Validate a field patch and the resulting image count without applying them.
        The listing itself is left untouched.

        Raises:
            ValueError: If the patched listing would fail validation
        """
        pending = Listing(**{
            name: changes.get(name, getattr(self, name))
            for name in ("price", "bedrooms", "bathrooms", "area", "longitude", "latitude")
        })
        pending.validate_price()
        pending.validate_rooms()
        pending.validate_coordinates()
        self.check_image_count(image_count)

    def to_dict(self, include_owner: bool = False, include_reviews: bool = False) -> dict:
        """
        Convert listing to dictionary.

        Args:
            include_owner: Whether to include owner information
            include_reviews: Whether to include reviews with their authors

        Returns:
            Dictionary representation of listing
        """
        primary = self.primary_image
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "country": self.country,
            "price": float(self.price),
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "category": self.category.value if self.category else None,
            "property_category": self.property_category,
            "amenities": list(self.amenities or []),
            "image": primary.to_dict() if primary else None,
            "images": [image.to_dict() for image in self.images],
            "geometry": self.geometry,
            "owner_id": str(self.owner_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_owner and self.owner:
            result["owner"] = self.owner.to_dict()

        if include_reviews:
            result["reviews"] = [review.to_dict(include_author=True) for review in self.reviews]

        return result


# Composite index for an owner's listings ordered by recency
owner_updated_index = Index(
    'idx_listings_owner_updated',
    Listing.owner_id,
    Listing.updated_at.desc()
)
