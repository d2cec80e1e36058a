"""Review lifecycle tests."""

from __future__ import annotations

import logging
import sqlite3

import pytest

from bruinlease.data_access import listings_dao, reviews_dao
from bruinlease.services import reviews
from bruinlease.services.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError


def _rating(listing_id: int) -> tuple[float, int]:
    listing = listings_dao.get_listing_by_id(listing_id)
    return listing.average_rating, listing.review_count


def test_rating_follows_review_lifecycle(app, fresh_listing, bella, carlos):
    """Create, create, update, delete keeps the listing aggregate in step."""

    with app.app_context():
        listing_id = fresh_listing.listing_id
        assert _rating(listing_id) == (0, 0)

        bella_review = reviews.create_review(listing_id, bella.user_id, 4, "Decent place overall")
        assert _rating(listing_id) == (4.0, 1)

        reviews.create_review(listing_id, carlos.user_id, 5, "Wonderful experience here")
        assert _rating(listing_id) == (4.5, 2)

        reviews.update_review(bella_review.review_id, bella.user_id, rating=2)
        assert _rating(listing_id) == (3.5, 2)

        reviews.delete_review(bella_review.review_id, bella.user_id)
        assert _rating(listing_id) == (5.0, 1)


def test_create_update_delete_restores_aggregate(app, fresh_listing, bella, carlos):
    with app.app_context():
        listing_id = fresh_listing.listing_id
        reviews.create_review(listing_id, carlos.user_id, 3, "Perfectly average stay")
        before = _rating(listing_id)

        review = reviews.create_review(listing_id, bella.user_id, 5, "Loved living here")
        reviews.update_review(review.review_id, bella.user_id, rating=1, comment="Changed my mind about it")
        reviews.delete_review(review.review_id, bella.user_id)

        assert _rating(listing_id) == before


def test_owner_cannot_review_own_listing(app, fresh_listing, owner):
    with app.app_context():
        with pytest.raises(ForbiddenError):
            reviews.create_review(fresh_listing.listing_id, owner.user_id, 5, "My own place is the best")
        assert reviews.list_reviews(fresh_listing.listing_id) == []


def test_second_review_by_same_user_conflicts(app, fresh_listing, bella):
    with app.app_context():
        reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        with pytest.raises(ConflictError):
            reviews.create_review(fresh_listing.listing_id, bella.user_id, 1, "Second thoughts here")
        assert _rating(fresh_listing.listing_id) == (4.0, 1)


def test_racing_insert_reports_conflict(app, fresh_listing, bella, monkeypatch):
    """The unique index still yields a conflict if the existence check is passed."""

    with app.app_context():
        reviews_dao.create_review(fresh_listing.listing_id, bella.user_id, 4, "Got here first somehow")
        lookups = iter([None])
        original = reviews_dao.get_review_for_author
        monkeypatch.setattr(
            reviews_dao,
            "get_review_for_author",
            lambda listing_id, user_id: next(lookups, original(listing_id, user_id)),
        )
        with pytest.raises(ConflictError):
            reviews.create_review(fresh_listing.listing_id, bella.user_id, 2, "Racing second review")


def test_review_on_missing_listing(app, bella):
    with app.app_context():
        with pytest.raises(NotFoundError):
            reviews.create_review(424242, bella.user_id, 4, "Where did it go?")


@pytest.mark.parametrize(
    ("rating", "comment"),
    [
        (0, "Valid comment length"),
        (6, "Valid comment length"),
        (True, "Valid comment length"),
        ("5", "Valid comment length"),
        (3, "too short"),
        (3, "   padded   "),
        (3, "x" * 501),
        (3, "          "),
    ],
)
def test_create_rejects_invalid_fields(app, fresh_listing, bella, rating, comment):
    with app.app_context():
        with pytest.raises(InvalidInputError):
            reviews.create_review(fresh_listing.listing_id, bella.user_id, rating, comment)


def test_comment_is_trimmed(app, fresh_listing, bella):
    with app.app_context():
        review = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "   Decent place overall  ")
        assert review.comment == "Decent place overall"


def test_only_author_may_update_or_delete(app, fresh_listing, bella, carlos):
    with app.app_context():
        review = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        with pytest.raises(ForbiddenError):
            reviews.update_review(review.review_id, carlos.user_id, rating=1)
        with pytest.raises(ForbiddenError):
            reviews.delete_review(review.review_id, carlos.user_id)
        assert reviews_dao.get_review_by_id(review.review_id).rating == 4


def test_update_and_delete_missing_review(app, bella):
    with app.app_context():
        with pytest.raises(NotFoundError):
            reviews.update_review(999, bella.user_id, rating=3)
        with pytest.raises(NotFoundError):
            reviews.delete_review(999, bella.user_id)


def test_partial_update_keeps_omitted_fields(app, fresh_listing, bella):
    with app.app_context():
        review = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        updated = reviews.update_review(review.review_id, bella.user_id, comment="Actually pretty great")
        assert updated.rating == 4
        assert updated.comment == "Actually pretty great"
        with pytest.raises(InvalidInputError):
            reviews.update_review(review.review_id, bella.user_id, rating=9)


def test_deleted_review_is_terminal(app, fresh_listing, bella):
    with app.app_context():
        review = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        reviews.delete_review(review.review_id, bella.user_id)
        with pytest.raises(NotFoundError):
            reviews.update_review(review.review_id, bella.user_id, rating=5)
        # Deleting frees the slot for a brand new review.
        again = reviews.create_review(fresh_listing.listing_id, bella.user_id, 5, "Came back and loved it")
        assert again.review_id != review.review_id


def test_list_reviews_newest_first(app, fresh_listing, bella, carlos, dana):
    with app.app_context():
        first = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        second = reviews.create_review(fresh_listing.listing_id, carlos.user_id, 5, "Wonderful experience here")
        third = reviews.create_review(fresh_listing.listing_id, dana.user_id, 3, "Fine for a semester")
        listed = reviews.list_reviews(fresh_listing.listing_id)
        assert [item.review_id for item in listed] == [third.review_id, second.review_id, first.review_id]

        assert reviews.get_my_review(fresh_listing.listing_id, carlos.user_id).review_id == second.review_id
        assert reviews.get_my_review(fresh_listing.listing_id, 31337) is None


def test_failed_rating_refresh_keeps_review(app, fresh_listing, bella, monkeypatch, caplog):
    def _broken(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(listings_dao, "refresh_rating_stats", _broken)
    with app.app_context():
        with caplog.at_level(logging.ERROR):
            review = reviews.create_review(fresh_listing.listing_id, bella.user_id, 4, "Decent place overall")
        assert reviews_dao.get_review_by_id(review.review_id) is not None
        assert _rating(fresh_listing.listing_id) == (0, 0)
    assert "needs reconciliation" in caplog.text
