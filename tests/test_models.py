"""
Tests for model validation and business logic methods.
"""

import uuid
from decimal import Decimal

import pytest

from app.config import settings
from app.models.image import ListingImage
from app.models.listing import Listing, ListingCategory
from app.models.review import Review
from app.models.user import User
from tests.conftest import ImageFactory, LAKE_TAHOE


def build_listing(image_count: int = 1, **overrides) -> Listing:
    values = {
        "title": "Lakeview Cabin",
        "description": "Quiet cabin a short walk from the shore.",
        "location": "Lake Tahoe, CA",
        "country": "United States",
        "price": Decimal("1800.00"),
        "category": ListingCategory.RENT,
        "amenities": [],
        "owner_id": uuid.uuid4(),
        "longitude": LAKE_TAHOE.longitude,
        "latitude": LAKE_TAHOE.latitude,
    }
    values.update(overrides)
    listing = Listing(**values)
    listing.images = [
        ListingImage(position=i, **image) for i, image in enumerate(ImageFactory.image_data(image_count))
    ]
    return listing


class TestUserModel:
    """Test User model validation and methods."""

    @pytest.mark.parametrize(
        "email",
        ["test@example.com", "User.Name@Domain.co.uk", "user+tag@example.org"]
    )
    def test_email_validation_valid(self, email):
        assert User.validate_email_format(email) == email.lower()

    @pytest.mark.parametrize("email", ["invalid-email", "@example.com", "test@", ""])
    def test_email_validation_invalid(self, email):
        with pytest.raises(ValueError, match="Invalid email format"):
            User.validate_email_format(email)

    def test_password_hashing(self):
        """Hashes are bcrypt and verify only the original password."""
        hashed = User.hash_password("testpassword123")
        user = User(email="ada@example.com", first_name="Ada", last_name="Lovelace", hashed_password=hashed)

        assert hashed.startswith("$2b$")
        assert user.verify_password("testpassword123")
        assert not user.verify_password("testpassword124")

    def test_password_too_short(self):
        with pytest.raises(ValueError, match="at least 8 characters"):
            User.hash_password("1234567")

    def test_to_dict_excludes_credentials(self):
        user = User(
            id=uuid.uuid4(),
            email="ada@example.com",
            first_name="Ada",
            last_name="Lovelace",
            hashed_password="$2b$12$hash"
        )

        data = user.to_dict()

        assert set(data) == {"id", "first_name", "last_name", "email"}
        assert user.full_name == "Ada Lovelace"


class TestListingModel:
    """Test Listing model validation and derived properties."""

    def test_valid_listing(self):
        listing = build_listing(image_count=3)

        listing.validate_all()

        assert listing.primary_image is listing.images[0]
        assert listing.geometry == {"type": "Point", "coordinates": [-120.0324, 39.0968]}

    @pytest.mark.parametrize("image_count", [0, 9])
    def test_image_count_bounds(self, image_count):
        with pytest.raises(ValueError):
            build_listing(image_count=image_count).validate_images()

    @pytest.mark.parametrize("image_count", [1, 8])
    def test_image_count_limits_are_inclusive(self, image_count):
        build_listing(image_count=image_count).validate_images()

    def test_image_limit_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "max_images_per_listing", 10)

        build_listing(image_count=10).validate_images()
        with pytest.raises(ValueError, match="more than 10 images"):
            build_listing(image_count=11).validate_images()

    def test_validate_changes_leaves_listing_untouched(self):
        listing = build_listing(image_count=2)

        with pytest.raises(ValueError, match="price cannot be negative"):
            listing.validate_changes({"price": Decimal("-1")}, image_count=2)
        with pytest.raises(ValueError, match="at least one image"):
            listing.validate_changes({"title": "Bare"}, image_count=0)

        listing.validate_changes({"price": Decimal("2100.00"), "bedrooms": 3}, image_count=8)
        assert listing.price == Decimal("1800.00")
        assert listing.title == "Lakeview Cabin"
        assert len(listing.images) == 2

    def test_no_primary_image_without_images(self):
        assert build_listing(image_count=0).primary_image is None

    def test_negative_price(self):
        with pytest.raises(ValueError, match="price cannot be negative"):
            build_listing(price=Decimal("-1")).validate_price()

    def test_negative_rooms(self):
        with pytest.raises(ValueError, match="bedrooms cannot be negative"):
            build_listing(bedrooms=-1).validate_rooms()

    def test_missing_coordinates(self):
        with pytest.raises(ValueError, match="geocoded coordinates"):
            build_listing(longitude=None, latitude=None).validate_coordinates()

    @pytest.mark.parametrize("longitude,latitude", [(0.0, 91.0), (181.0, 0.0)])
    def test_coordinates_out_of_range(self, longitude, latitude):
        with pytest.raises(ValueError):
            build_listing(longitude=longitude, latitude=latitude).validate_coordinates()


class TestReviewModel:
    """Test Review rating bounds."""

    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_valid_rating(self, rating):
        Review(rating=rating, comment="ok", listing_id=uuid.uuid4(), author_id=uuid.uuid4()).validate_rating()

    @pytest.mark.parametrize("rating", [0, 6, None])
    def test_invalid_rating(self, rating):
        with pytest.raises(ValueError, match="between 1 and 5"):
            Review(rating=rating, comment="ok", listing_id=uuid.uuid4(), author_id=uuid.uuid4()).validate_rating()
