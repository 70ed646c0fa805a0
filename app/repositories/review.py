"""
Review repository for creating and removing listing reviews.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from app.repositories.base import BaseRepository
from app.models.review import Review
from typing import Optional, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    """Repository for reviews; every review belongs to exactly one listing."""

    def __init__(self, db: AsyncSession):
        super().__init__(Review, db)

    async def create_review(self, review_data: Dict[str, Any]) -> Review:
        """
        Create a review after checking the rating range.

        Raises:
            ValueError: If the rating is outside 1..5
        """
        review = Review(**review_data)
        review.validate_rating()

        try:
            self.db.add(review)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create review: {e}")
            raise

        return await self.get_listing_review(review.listing_id, review.id)

    async def get_listing_review(self, listing_id: uuid.UUID, review_id: uuid.UUID) -> Optional[Review]:
        """Get a review only if it belongs to the given listing."""
        try:
            query = (
                select(Review)
                .where(Review.id == review_id, Review.listing_id == listing_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get review {review_id} of listing {listing_id}: {e}")
            raise

    async def delete_listing_review(self, listing_id: uuid.UUID, review_id: uuid.UUID) -> bool:
        """
        Delete a review scoped to its listing in a single statement.

        Returns:
            True if a review was removed, False if none matched
        """
        try:
            result = await self.db.execute(
                delete(Review).where(Review.id == review_id, Review.listing_id == listing_id)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete review {review_id}: {e}")
            raise

        deleted = result.rowcount > 0
        logger.debug(f"Review {review_id} deleted: {deleted}")
        return deleted
