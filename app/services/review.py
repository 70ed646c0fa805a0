"""
Review service for adding and removing reviews on listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.listing import ListingRepository
from app.repositories.review import ReviewRepository
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate
from app.utils.exceptions import NotFoundError, ValidationError, ReviewAuthorshipError
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewService:
    """Review workflow; authorship is checked by the caller through ensure_author."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.review_repo = ReviewRepository(db_session)

    async def _ensure_listing_exists(self, listing_id: uuid.UUID) -> None:
        if not await self.listing_repo.exists(listing_id):
            raise NotFoundError("Property")

    async def create_review(self, listing_id: uuid.UUID, review_data: ReviewCreate, current_user: User) -> Review:
        """
        Add a review to a listing.

        Raises:
            NotFoundError: If the listing doesn't exist
            ValidationError: If the rating is out of range
        """
        await self._ensure_listing_exists(listing_id)

        try:
            review = await self.review_repo.create_review({
                "rating": review_data.rating,
                "comment": review_data.comment,
                "listing_id": listing_id,
                "author_id": current_user.id,
            })
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Review {review.id} added to listing {listing_id} by {current_user.email}")
        return review

    async def delete_review(self, listing_id: uuid.UUID, review_id: uuid.UUID) -> None:
        """
        Remove a review from a listing.

        Raises:
            NotFoundError: If the listing or the review doesn't exist
        """
        await self._ensure_listing_exists(listing_id)

        if not await self.review_repo.delete_listing_review(listing_id, review_id):
            raise NotFoundError("Review")

        logger.info(f"Review {review_id} deleted from listing {listing_id}")

    async def ensure_author(self, listing_id: uuid.UUID, review_id: uuid.UUID, current_user: User) -> Review:
        """
        Load a review of a listing and check that the current user wrote it.

        Raises:
            NotFoundError: If the listing or the review doesn't exist
            ReviewAuthorshipError: If the user is not the author
        """
        await self._ensure_listing_exists(listing_id)

        review = await self.review_repo.get_listing_review(listing_id, review_id)
        if not review:
            raise NotFoundError("Review")

        if review.author_id != current_user.id:
            logger.warning(f"User {current_user.id} denied deleting review {review_id}")
            raise ReviewAuthorshipError()

        return review
