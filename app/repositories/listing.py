"""
Listing repository: persistence boundary for listings and their ordered image sets.
Enforces the image-count invariant on every write; never touches external image storage.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.listing import Listing
from app.models.image import ListingImage
from app.models.review import Review
from typing import Optional, List, Dict, Any, Sequence
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    """Repository for listings, their images and the reviews attached to them."""

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    @staticmethod
    def _build_images(images: Sequence[Dict[str, Any]], start: int = 0) -> List[ListingImage]:
        return [
            ListingImage(
                position=start + offset,
                url=image["url"],
                external_id=image["external_id"],
                original_filename=image.get("original_filename") or "",
            )
            for offset, image in enumerate(images)
        ]

    async def create_listing(self, listing_data: Dict[str, Any], images: Sequence[Dict[str, Any]]) -> Listing:
        """
        Create a new listing together with its ordered image set.

        Args:
            listing_data: Listing column values, including owner_id and coordinates
            images: Uploaded images as dicts with url, external_id, original_filename

        Returns:
            Created listing with owner, images and reviews loaded

        Raises:
            ValueError: If the listing violates a model invariant
        """
        listing = Listing(**listing_data)
        listing.images = self._build_images(images)

        try:
            listing.validate_all()
        except ValueError as e:
            logger.warning(f"Listing validation failed: {e}")
            raise

        try:
            self.db.add(listing)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create listing: {e}")
            raise

        logger.debug(f"Created listing {listing.id} with {len(images)} images")
        return await self.get_listing_with_details(listing.id)

    async def get_listing_with_details(self, listing_id: uuid.UUID) -> Optional[Listing]:
        """
        Get listing with owner, images, reviews and review authors.

        Returns:
            Listing with loaded relationships or None if not found
        """
        try:
            query = (
                select(Listing)
                .options(
                    selectinload(Listing.owner),
                    selectinload(Listing.images),
                    selectinload(Listing.reviews).selectinload(Review.author)
                )
                .where(Listing.id == listing_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            listing = result.scalar_one_or_none()

            if listing:
                logger.debug(f"Retrieved listing with details: {listing_id}")
            else:
                logger.debug(f"Listing {listing_id} not found")

            return listing
        except Exception as e:
            logger.error(f"Failed to get listing with details {listing_id}: {e}")
            raise

    async def get_listings_by_owner(self, owner_id: uuid.UUID) -> List[Listing]:
        """Get every listing owned by a user, most recently updated first."""
        try:
            query = (
                select(Listing)
                .options(selectinload(Listing.images))
                .where(Listing.owner_id == owner_id)
                .order_by(desc(Listing.updated_at), desc(Listing.created_at))
            )
            result = await self.db.execute(query)
            listings = list(result.scalars().all())

            logger.debug(f"Retrieved {len(listings)} listings for owner {owner_id}")
            return listings
        except Exception as e:
            logger.error(f"Failed to get listings by owner {owner_id}: {e}")
            raise

    async def list_listings(self, skip: int = 0, limit: Optional[int] = None) -> List[Listing]:
        """Get all listings, newest first."""
        try:
            query = (
                select(Listing)
                .options(selectinload(Listing.images))
                .order_by(desc(Listing.created_at))
                .offset(skip)
            )
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            listings = list(result.scalars().all())

            logger.debug(f"Retrieved {len(listings)} listings")
            return listings
        except Exception as e:
            logger.error(f"Failed to list listings: {e}")
            raise

    async def save_listing(
        self,
        listing: Listing,
        changes: Dict[str, Any],
        kept_images: Sequence[ListingImage],
        new_images: Sequence[Dict[str, Any]]
    ) -> Listing:
        """
        Apply a field patch and a reconciled image set to a loaded listing.
        The final image order is kept images followed by new images.
        Images of the listing that are not kept are deleted as orphans.

        Args:
            listing: Listing loaded in this session
            changes: Column values to overwrite
            kept_images: Existing images to retain, in order
            new_images: Newly uploaded images to append

        Returns:
            Updated listing with relationships reloaded

        Raises:
            ValueError: If the resulting listing violates a model invariant
        """
        listing_id = listing.id
        try:
            listing.validate_changes(changes, len(kept_images) + len(new_images))
        except ValueError as e:
            logger.warning(f"Listing {listing_id} validation failed: {e}")
            raise

        try:
            for field, value in changes.items():
                setattr(listing, field, value)

            listing.images = list(kept_images) + self._build_images(new_images, start=len(kept_images))
            for position, image in enumerate(listing.images):
                image.position = position

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to save listing {listing_id}: {e}")
            raise

        logger.debug(f"Saved listing {listing_id} with {len(listing.images)} images")
        return await self.get_listing_with_details(listing_id)

    async def delete_listing(self, listing_id: uuid.UUID) -> bool:
        """
        Delete a listing with its image rows and reviews in one transaction.
        External image storage is left untouched.

        Returns:
            True if the listing existed, False otherwise
        """
        try:
            await self.db.execute(delete(Review).where(Review.listing_id == listing_id))
            await self.db.execute(delete(ListingImage).where(ListingImage.listing_id == listing_id))
            result = await self.db.execute(delete(Listing).where(Listing.id == listing_id))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete listing {listing_id}: {e}")
            raise

        deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Deleted listing {listing_id} with its images and reviews")
        else:
            logger.debug(f"Listing {listing_id} not found for deletion")
        return deleted
