"""
Test configuration and fixtures for the ProRental API.
Provides database fixtures, provider test doubles, test data factories and common test utilities.
"""

import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-the-prorental-test-suite"
os.environ["MAP_TOKEN"] = "test-map-token"
os.environ["CLOUDINARY_CLOUD_NAME"] = ""

import io
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional, Set

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config import get_settings
from app.database import Base, get_db
from app.models.listing import Listing, ListingCategory
from app.models.user import User
from app.repositories.listing import ListingRepository
from app.repositories.review import ReviewRepository
from app.repositories.user import UserRepository
from app.schemas.listing import ListingCreate
from app.services.auth import AuthService
from app.services.geocoding import Coordinates
from app.services.image import ImageService, ImageUpload, UploadConstraints
from app.services.listing import ListingService
from app.services.review import ReviewService
from app.services.storage import StoredImage
from app.utils.auth import create_access_token
from app.utils.dependencies import get_geocoder, get_image_service
from app.utils.exceptions import GeocodingProviderError, UploadProviderError


TEST_DATABASE_URL = "sqlite+aiosqlite://"

LAKE_TAHOE = Coordinates(longitude=-120.0324, latitude=39.0968)


class FakeImageStorage:
    """In-memory image storage that records every call."""

    def __init__(self):
        self.stored: Dict[str, str] = {}
        self.store_calls: List[str] = []
        self.destroy_calls: List[str] = []
        self.fail_on_store_call: Optional[int] = None
        self.failing_destroy_ids: Set[str] = set()

    async def store(self, content: bytes, filename: str) -> StoredImage:
        self.store_calls.append(filename)
        if self.fail_on_store_call is not None and len(self.store_calls) == self.fail_on_store_call:
            raise UploadProviderError()

        external_id = f"proRental/properties/{uuid.uuid4().hex}"
        url = f"https://res.cloudinary.com/test/image/upload/{external_id}.jpg"
        self.stored[external_id] = url
        return StoredImage(url=url, external_id=external_id)

    async def destroy(self, external_id: str) -> bool:
        self.destroy_calls.append(external_id)
        if external_id in self.failing_destroy_ids:
            raise UploadProviderError("Failed to delete image from cloud storage.")
        return self.stored.pop(external_id, None) is not None


class FakeGeocoder:
    """Geocoder double resolving every location to one point unless told otherwise."""

    def __init__(self, coordinates: Coordinates = LAKE_TAHOE):
        self.coordinates = coordinates
        self.queries: List[str] = []
        self.unknown_locations: Set[str] = set()
        self.unavailable = False

    async def resolve(self, query: str) -> Optional[Coordinates]:
        self.queries.append(query)
        if self.unavailable:
            raise GeocodingProviderError()
        if query in self.unknown_locations:
            return None
        return self.coordinates


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# Provider doubles
@pytest.fixture
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def image_service(image_storage: FakeImageStorage) -> ImageService:
    return ImageService(image_storage, UploadConstraints())


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


@pytest.fixture
def review_repository(db_session: AsyncSession) -> ReviewRepository:
    return ReviewRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession, image_service: ImageService, geocoder: FakeGeocoder) -> ListingService:
    return ListingService(db_session, image_service, geocoder, get_settings())


@pytest.fixture
def review_service(db_session: AsyncSession) -> ReviewService:
    return ReviewService(db_session)


@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    image_service: ImageService,
    geocoder: FakeGeocoder
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the database and provider clients overridden."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_service] = lambda: image_service
    app.dependency_overrides[get_geocoder] = lambda: geocoder

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = "testpassword123",
        first_name: str = "Test",
        last_name: str = "User",
        is_active: bool = True
    ) -> dict:
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ImageFactory:
    """Factory for image payloads."""

    @staticmethod
    def jpeg_bytes(width: int = 32, height: int = 24, color: str = "blue") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color=color).save(buffer, format="JPEG")
        return buffer.getvalue()

    @staticmethod
    def create_upload(
        filename: str = "photo.jpg",
        content_type: Optional[str] = "image/jpeg",
        content: bytes = None
    ) -> ImageUpload:
        return ImageUpload(
            filename=filename,
            content_type=content_type,
            content=content if content is not None else ImageFactory.jpeg_bytes()
        )

    @staticmethod
    def create_uploads(count: int, prefix: str = "photo") -> List[ImageUpload]:
        return [ImageFactory.create_upload(filename=f"{prefix}{i}.jpg") for i in range(count)]

    @staticmethod
    def image_data(count: int) -> List[dict]:
        return [
            {
                "url": f"https://res.cloudinary.com/test/image/upload/img{i}.jpg",
                "external_id": f"proRental/properties/img{i}",
                "original_filename": f"img{i}.jpg",
            }
            for i in range(count)
        ]


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_data(
        title: str = "Lakeview Cabin",
        description: str = "Quiet cabin a short walk from the shore.",
        location: str = "Lake Tahoe, CA",
        country: str = "United States",
        price: Decimal = Decimal("1800.00"),
        bedrooms: Optional[int] = 2,
        bathrooms: Optional[int] = 1,
        area: Optional[int] = 950,
        category: Optional[ListingCategory] = ListingCategory.RENT,
        property_category: Optional[str] = "cabin",
        amenities: Optional[List[str]] = None
    ) -> ListingCreate:
        return ListingCreate(
            title=title,
            description=description,
            location=location,
            country=country,
            price=price,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            area=area,
            category=category,
            property_category=property_category,
            amenities=amenities if amenities is not None else ["Wifi", "Fireplace"]
        )

    @staticmethod
    def create_row_data(owner_id: uuid.UUID, **overrides) -> dict:
        """Column values for inserting a listing through the repository."""
        data = ListingFactory.create_listing_data(**overrides).model_dump()
        data.update({
            "owner_id": owner_id,
            "longitude": LAKE_TAHOE.longitude,
            "latitude": LAKE_TAHOE.latitude,
        })
        return data

    @staticmethod
    async def create_listing(
        listing_repo: ListingRepository,
        owner_id: uuid.UUID,
        image_count: int = 1,
        **overrides
    ) -> Listing:
        """Create a test listing in the database without touching storage."""
        return await listing_repo.create_listing(
            ListingFactory.create_row_data(owner_id, **overrides),
            ImageFactory.image_data(image_count)
        )


# Common test fixtures
@pytest.fixture
async def test_owner(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="owner@test.com",
        first_name="Olive",
        last_name="Owner"
    )


@pytest.fixture
async def test_other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other@test.com",
        first_name="Oscar",
        last_name="Other"
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@test.com",
        is_active=False
    )


@pytest.fixture
async def test_listing(listing_service: ListingService, test_owner: User) -> Listing:
    """A listing with three stored images created through the workflow."""
    return await listing_service.create_listing(
        ListingFactory.create_listing_data(),
        ImageFactory.create_uploads(3, prefix="cabin"),
        test_owner
    )


# Utility functions for tests
def auth_headers(user: User) -> Dict[str, str]:
    """Authorization header carrying a fresh access token for the user."""
    token = create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


def multipart_images(count: int, prefix: str = "photo") -> List[tuple]:
    """Multipart ``files`` entries for the listing[images] field."""
    return [
        ("listing[images]", (f"{prefix}{i}.jpg", ImageFactory.jpeg_bytes(), "image/jpeg"))
        for i in range(count)
    ]
