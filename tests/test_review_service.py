"""
Tests for review creation, authorship checks and deletion.
"""

import uuid

import pytest

from app.models.listing import Listing
from app.models.user import User
from app.schemas.review import ReviewCreate
from app.services.listing import ListingService
from app.services.review import ReviewService
from app.utils.exceptions import NotFoundError, ReviewAuthorshipError
from tests.conftest import ImageFactory, ListingFactory


class TestReviewService:

    @pytest.mark.asyncio
    async def test_create_review(
        self,
        review_service: ReviewService,
        test_listing: Listing,
        test_other_user: User
    ):
        review = await review_service.create_review(
            test_listing.id,
            ReviewCreate(rating=4, comment="  Great view, friendly host. "),
            test_other_user
        )

        assert review.rating == 4
        assert review.comment == "Great view, friendly host."
        assert review.listing_id == test_listing.id
        assert review.author_id == test_other_user.id
        assert review.author.first_name == "Oscar"

    @pytest.mark.asyncio
    async def test_owner_may_review_own_listing(
        self,
        review_service: ReviewService,
        test_listing: Listing,
        test_owner: User
    ):
        review = await review_service.create_review(
            test_listing.id,
            ReviewCreate(rating=5, comment="Biased but true"),
            test_owner
        )

        assert review.author_id == test_owner.id

    @pytest.mark.asyncio
    async def test_create_review_for_missing_listing(self, review_service: ReviewService, test_other_user: User):
        with pytest.raises(NotFoundError) as exc_info:
            await review_service.create_review(uuid.uuid4(), ReviewCreate(rating=3, comment="?"), test_other_user)

        assert exc_info.value.detail == "Property does not exist!"

    @pytest.mark.asyncio
    async def test_ensure_author(
        self,
        review_service: ReviewService,
        test_listing: Listing,
        test_owner: User,
        test_other_user: User
    ):
        review = await review_service.create_review(
            test_listing.id,
            ReviewCreate(rating=2, comment="Too cold"),
            test_other_user
        )

        assert (await review_service.ensure_author(test_listing.id, review.id, test_other_user)).id == review.id

        # The listing owner is not the review's author
        with pytest.raises(ReviewAuthorshipError):
            await review_service.ensure_author(test_listing.id, review.id, test_owner)

    @pytest.mark.asyncio
    async def test_ensure_author_of_missing_review(
        self,
        review_service: ReviewService,
        test_listing: Listing,
        test_owner: User
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await review_service.ensure_author(test_listing.id, uuid.uuid4(), test_owner)

        assert exc_info.value.detail == "Review does not exist!"

    @pytest.mark.asyncio
    async def test_delete_review(
        self,
        review_service: ReviewService,
        listing_service: ListingService,
        test_listing: Listing,
        test_other_user: User
    ):
        review = await review_service.create_review(
            test_listing.id,
            ReviewCreate(rating=5, comment="Loved it"),
            test_other_user
        )

        await review_service.delete_review(test_listing.id, review.id)

        listing = await listing_service.get_listing(test_listing.id)
        assert listing.reviews == []

        with pytest.raises(NotFoundError):
            await review_service.delete_review(test_listing.id, review.id)

    @pytest.mark.asyncio
    async def test_delete_review_through_wrong_listing(
        self,
        review_service: ReviewService,
        listing_service: ListingService,
        test_listing: Listing,
        test_other_user: User
    ):
        other_listing = await listing_service.create_listing(
            ListingFactory.create_listing_data(title="Beach Bungalow"),
            ImageFactory.create_uploads(1),
            test_other_user
        )
        review = await review_service.create_review(
            test_listing.id,
            ReviewCreate(rating=3, comment="Fine"),
            test_other_user
        )

        with pytest.raises(NotFoundError):
            await review_service.delete_review(other_listing.id, review.id)

        listing = await listing_service.get_listing(test_listing.id)
        assert [r.id for r in listing.reviews] == [review.id]
