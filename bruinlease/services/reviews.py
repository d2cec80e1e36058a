"""Review lifecycle: create, update and delete reviews on listings.

Every mutation re-checks the rules that depend on persisted state (listing
ownership, authorship, one review per user per listing) and then refreshes
the parent listing's rating through :mod:`ratings`.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from flask import current_app

from ..data_access import listings_dao, reviews_dao
from ..models.entities import Review
from . import ratings
from .errors import AggregationFailure, ConflictError, ForbiddenError, InvalidInputError, NotFoundError


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidInputError("Rating must be between 1 and 5")
    return rating


def validate_comment(comment) -> str:
    if not isinstance(comment, str) or not comment.strip():
        raise InvalidInputError("Comment cannot be empty")
    comment = comment.strip()
    low = current_app.config["REVIEW_COMMENT_MIN_LENGTH"]
    high = current_app.config["REVIEW_COMMENT_MAX_LENGTH"]
    if not low <= len(comment) <= high:
        raise InvalidInputError(f"Comment must be between {low} and {high} characters")
    return comment


def _refresh_rating(listing_id: int) -> None:
    # The rating is a cache: a failed refresh never undoes the review change.
    try:
        ratings.recompute(listing_id)
    except AggregationFailure as exc:
        current_app.logger.error(
            "Rating for listing %s is stale and needs reconciliation: %s",
            listing_id,
            exc.message,
            exc_info=True,
        )


def _get_owned_review(review_id: int, actor_id: int, action: str) -> Review:
    review = reviews_dao.get_review_by_id(review_id)
    if review is None:
        raise NotFoundError("Review not found")
    if review.user_id != actor_id:
        raise ForbiddenError(f"Not authorized to {action} this review")
    return review


def create_review(listing_id: int, author_id: int, rating: int, comment: str) -> Review:
    """Create the author's review of a listing they do not own."""

    rating = validate_rating(rating)
    comment = validate_comment(comment)

    listing = listings_dao.get_listing_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    if listing.owner_id == author_id:
        raise ForbiddenError("You cannot review your own listing")
    if reviews_dao.get_review_for_author(listing_id, author_id) is not None:
        raise ConflictError("You have already reviewed this listing")

    try:
        review = reviews_dao.create_review(listing_id, author_id, rating, comment)
    except sqlite3.IntegrityError as exc:
        # A concurrent create won the race past the existence check above.
        if reviews_dao.get_review_for_author(listing_id, author_id) is not None:
            raise ConflictError("You have already reviewed this listing") from exc
        raise NotFoundError("Listing not found") from exc

    current_app.logger.info(
        "Review %s created on listing %s by user %s", review.review_id, listing_id, author_id
    )
    _refresh_rating(listing_id)
    return review


def update_review(
    review_id: int,
    actor_id: int,
    rating: Optional[int] = None,
    comment: Optional[str] = None,
) -> Review:
    """Apply a partial update to a review the actor wrote."""

    review = _get_owned_review(review_id, actor_id, "update")
    if rating is not None:
        rating = validate_rating(rating)
    if comment is not None:
        comment = validate_comment(comment)

    reviews_dao.update_review(review_id, rating=rating, comment=comment)
    current_app.logger.info("Review %s updated by user %s", review_id, actor_id)
    _refresh_rating(review.listing_id)
    return reviews_dao.get_review_by_id(review_id)


def delete_review(review_id: int, actor_id: int) -> None:
    """Delete a review the actor wrote and refresh the listing rating."""

    review = _get_owned_review(review_id, actor_id, "delete")
    listing_id = review.listing_id
    reviews_dao.delete_review(review_id)
    current_app.logger.info("Review %s deleted by user %s", review_id, actor_id)
    _refresh_rating(listing_id)


def list_reviews(listing_id: int) -> list[Review]:
    """Reviews for a listing, newest first."""

    return reviews_dao.list_reviews_for_listing(listing_id)


def get_my_review(listing_id: int, user_id: int) -> Review | None:
    return reviews_dao.get_review_for_author(listing_id, user_id)
