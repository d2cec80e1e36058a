"Data access helpers for listing reviews."

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Optional

from ..models.entities import Review
from .db import execute, get_db, query_all, query_one


class RatingStats(NamedTuple):
    """Raw totals for the reviews currently stored against a listing."""

    review_count: int
    rating_total: int


def _row_to_review(row) -> Review:
    return Review(
        review_id=row["review_id"],
        listing_id=row["listing_id"],
        user_id=row["user_id"],
        rating=row["rating"],
        comment=row["comment"],
        created_at=datetime.fromisoformat(row["created_at"].replace(" ", "T")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace(" ", "T")),
    )


def create_review(listing_id: int, user_id: int, rating: int, comment: str) -> Review:
    """Insert a new review.

    Raises ``sqlite3.IntegrityError`` when the author already reviewed the
    listing; the unique index makes the check and the insert a single step.
    """

    db = get_db()
    cursor = execute(
        db,
        """
        INSERT INTO reviews (listing_id, user_id, rating, comment)
        VALUES (?, ?, ?, ?)
        """,
        (listing_id, user_id, rating, comment),
    )
    return get_review_by_id(cursor.lastrowid, connection=db)


def get_review_by_id(review_id: int, connection=None) -> Review | None:
    """Fetch a review by primary key."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM reviews WHERE review_id = ?",
        (review_id,),
    )
    return _row_to_review(row) if row else None


def list_reviews_for_listing(listing_id: int) -> list[Review]:
    """Return reviews in reverse chronological order."""

    db = get_db()
    rows = query_all(
        db,
        """
        SELECT * FROM reviews
        WHERE listing_id = ?
        ORDER BY created_at DESC, review_id DESC
        """,
        (listing_id,),
    )
    return [_row_to_review(row) for row in rows]


def get_review_for_author(listing_id: int, user_id: int) -> Review | None:
    """Return the review a user left on a listing, if any."""

    db = get_db()
    row = query_one(
        db,
        """
        SELECT * FROM reviews
        WHERE listing_id = ? AND user_id = ?
        """,
        (listing_id, user_id),
    )
    return _row_to_review(row) if row else None


def update_review(review_id: int, rating: Optional[int] = None, comment: Optional[str] = None) -> None:
    """Apply a partial update; omitted fields keep their stored value."""

    updates: dict = {}
    if rating is not None:
        updates["rating"] = rating
    if comment is not None:
        updates["comment"] = comment
    if not updates:
        return

    columns = ", ".join(f"{key} = ?" for key in updates.keys())
    params = list(updates.values()) + [review_id]
    db = get_db()
    execute(
        db,
        f"""
        UPDATE reviews
        SET {columns}, updated_at = strftime('%Y-%m-%d %H:%M:%f', 'now')
        WHERE review_id = ?
        """,
        params,
    )


def delete_review(review_id: int) -> None:
    db = get_db()
    execute(db, "DELETE FROM reviews WHERE review_id = ?", (review_id,))


def rating_stats(listing_id: int) -> RatingStats:
    """Count and sum the ratings of every persisted review for a listing."""

    db = get_db()
    row = query_one(
        db,
        """
        SELECT COUNT(*) AS review_count, COALESCE(SUM(rating), 0) AS rating_total
        FROM reviews
        WHERE listing_id = ?
        """,
        (listing_id,),
    )
    return RatingStats(row["review_count"], row["rating_total"])
