"""
Listing service: orchestrates listing create, update and delete across the image
service, the geocoder and the listing repository.
"""

from typing import Optional, List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import Settings, get_settings
from app.repositories.listing import ListingRepository
from app.models.listing import Listing
from app.models.user import User
from app.schemas.listing import ListingCreate, ListingUpdate
from app.services.image import ImageService, ImageUpload, UploadedImage
from app.services.geocoding import MapboxGeocoder, Coordinates
from app.utils.exceptions import (
    NotFoundError,
    ValidationError,
    LocationUnresolvedError,
    ListingOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing workflow with injected image and geocoding clients.

    Any failure after images were uploaded releases the images uploaded by that
    call before the error propagates.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        image_service: ImageService,
        geocoder: MapboxGeocoder,
        settings: Optional[Settings] = None
    ):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.image_service = image_service
        self.geocoder = geocoder
        self.settings = settings or get_settings()

    @property
    def max_images(self) -> int:
        return self.settings.max_images_per_listing

    async def _geocode(self, location: str) -> Coordinates:
        coordinates = await self.geocoder.resolve(location)
        if coordinates is None:
            raise LocationUnresolvedError(location)
        return coordinates

    def check_create_request(self, uploads: Sequence[ImageUpload], location: Optional[str]) -> None:
        """
        Reject a create request before any provider call.

        Raises:
            ValidationError: If no or too many files are given or the location is blank
            Upload constraint errors from the image service
        """
        if not uploads:
            raise ValidationError("At least one property image is required")
        if len(uploads) > self.max_images:
            raise ValidationError(f"Please upload between 1 and {self.max_images} images")
        if not location or not location.strip():
            raise ValidationError("Location is required")

        self.image_service.validate(uploads)

    async def create_listing(
        self,
        listing_data: ListingCreate,
        uploads: Sequence[ImageUpload],
        current_user: User
    ) -> Listing:
        """
        Create a new listing owned by the current user.

        Args:
            listing_data: Validated listing fields
            uploads: 1 to max_images image files; the first becomes the primary image
            current_user: Owner of the new listing

        Returns:
            Created listing with owner and images loaded

        Raises:
            ValidationError: If no or too many files are given or the location is blank
            LocationUnresolvedError: If the geocoder knows no such place
            GeocodingProviderError: If the geocoder is unavailable
            UploadProviderError and upload constraint errors from the image service
        """
        self.check_create_request(uploads, listing_data.location)

        coordinates = await self._geocode(listing_data.location)
        uploaded = await self.image_service.upload(uploads)

        create_data = listing_data.model_dump()
        create_data["owner_id"] = current_user.id
        create_data["longitude"] = coordinates.longitude
        create_data["latitude"] = coordinates.latitude

        try:
            listing = await self.listing_repo.create_listing(
                create_data,
                [image.to_dict() for image in uploaded]
            )
        except ValueError as e:
            await self._release_uploads(uploaded)
            raise ValidationError(str(e))
        except Exception:
            await self._release_uploads(uploaded)
            raise

        logger.info(
            f"Listing created by {current_user.email}: {listing.title} "
            f"(ID: {listing.id}, images: {len(listing.images)})"
        )
        return listing

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        keep_images: Sequence[str],
        uploads: Sequence[ImageUpload]
    ) -> Listing:
        """
        Update a listing's fields and reconcile its image set.

        The final image set is the kept existing images, in their current order,
        followed by the newly uploaded ones. Keep URLs that match no existing image
        are ignored. Images that are not kept are released from storage after the
        listing is saved.

        Raises:
            NotFoundError: If the listing doesn't exist
            ValidationError: If the final image set would be empty or too large
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise NotFoundError("Property")

        keep_set = {url for url in keep_images if url}
        kept = [image for image in listing.images if image.url in keep_set]
        removed_ids = [image.external_id for image in listing.images if image.url not in keep_set]

        final_count = len(kept) + len(uploads)
        if final_count == 0:
            raise ValidationError("At least one image is required. Keep existing or add new images.")
        if final_count > self.max_images:
            raise ValidationError(
                f"A property can have at most {self.max_images} images. "
                f"Keeping {len(kept)} and adding {len(uploads)} would give {final_count}."
            )

        self.image_service.validate(uploads)

        changes = listing_data.changes()
        new_location = changes.get("location")
        if self.settings.regeocode_on_update and new_location and new_location != listing.location:
            coordinates = await self._geocode(new_location)
            changes["longitude"] = coordinates.longitude
            changes["latitude"] = coordinates.latitude

        uploaded = await self.image_service.upload(uploads)

        try:
            updated = await self.listing_repo.save_listing(
                listing,
                changes,
                kept,
                [image.to_dict() for image in uploaded]
            )
        except ValueError as e:
            await self._release_uploads(uploaded)
            raise ValidationError(str(e))
        except Exception:
            await self._release_uploads(uploaded)
            raise

        if removed_ids:
            released = await self.image_service.discard(removed_ids)
            logger.info(f"Released {released} of {len(removed_ids)} removed images of listing {listing_id}")

        logger.info(
            f"Listing updated: {listing_id} (kept {len(kept)}, added {len(uploaded)}, "
            f"removed {len(removed_ids)})"
        )
        return updated

    async def delete_listing(self, listing_id: uuid.UUID) -> None:
        """
        Delete a listing, its reviews and every one of its stored images.
        Storage failures are logged and do not stop the deletion.

        Raises:
            NotFoundError: If the listing doesn't exist
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise NotFoundError("Property")

        external_ids = [image.external_id for image in listing.images]
        released = await self.image_service.discard(external_ids)

        deleted = await self.listing_repo.delete_listing(listing_id)
        if not deleted:
            raise NotFoundError("Property")

        logger.info(f"Listing deleted: {listing_id} (released {released} of {len(external_ids)} images)")

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get listing with owner, images, and reviews with their authors.

        Raises:
            NotFoundError: If the listing doesn't exist
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise NotFoundError("Property")
        return listing

    async def get_listing_for_edit(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """Get a listing for its owner's edit form."""
        return await self.ensure_owner(listing_id, current_user)

    async def list_listings(self, skip: int = 0, limit: Optional[int] = None) -> List[Listing]:
        return await self.listing_repo.list_listings(skip=skip, limit=limit)

    async def get_owner_listings(self, current_user: User) -> List[Listing]:
        return await self.listing_repo.get_listings_by_owner(current_user.id)

    @staticmethod
    def is_owner(listing: Listing, user_id: uuid.UUID) -> bool:
        return listing.owner_id == user_id

    async def ensure_owner(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """
        Load a listing and check that the current user owns it.

        Raises:
            NotFoundError: If the listing doesn't exist
            ListingOwnershipError: If the user is not the owner
        """
        listing = await self.get_listing(listing_id)
        if not self.is_owner(listing, current_user.id):
            logger.warning(f"User {current_user.id} denied access to listing {listing_id}")
            raise ListingOwnershipError()
        return listing

    async def _release_uploads(self, uploaded: Sequence[UploadedImage]) -> None:
        if not uploaded:
            return
        released = await self.image_service.discard(uploaded)
        logger.warning(f"Listing write failed; released {released} of {len(uploaded)} uploaded images")
