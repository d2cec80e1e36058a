"""Data access helpers for housing listings."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Iterable, Optional, Sequence

from flask import current_app

from ..models.entities import AVAILABILITY_STATUSES, Listing
from .db import execute, get_db, query_all, query_one

# Owned by the rating aggregator; never writable through update_listing.
DERIVED_FIELDS = frozenset({"average_rating", "review_count"})

MUTABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "price",
        "address",
        "zip_code",
        "country",
        "bedrooms",
        "distance_from_campus",
        "lease_duration",
        "images",
        "availability",
    }
)


def _row_to_listing(row) -> Listing:
    return Listing(
        listing_id=row["listing_id"],
        owner_id=row["owner_id"],
        title=row["title"],
        description=row["description"],
        price=row["price"],
        address=row["address"],
        zip_code=row["zip_code"],
        country=row["country"],
        bedrooms=row["bedrooms"],
        distance_from_campus=row["distance_from_campus"],
        lease_duration=row["lease_duration"],
        images=json.loads(row["images"] or "[]"),
        availability=row["availability"],
        average_rating=float(row["average_rating"]),
        review_count=row["review_count"],
        created_at=datetime.fromisoformat(str(row["created_at"]).replace(" ", "T")),
    )


def _encode_images(images: Optional[Sequence[str]]) -> str:
    images = list(images or [])
    limit = current_app.config["LISTING_MAX_IMAGES"]
    if len(images) > limit:
        raise ValueError(f"A listing may carry at most {limit} images")
    if not all(isinstance(image, str) for image in images):
        raise ValueError("Images must be string references")
    return json.dumps(images)


def create_listing(
    owner_id: int,
    title: str,
    description: str,
    price: float,
    address: str,
    zip_code: str,
    bedrooms: int,
    distance_from_campus: float,
    lease_duration: str,
    country: str = "USA",
    images: Optional[Sequence[str]] = None,
    availability: str = "Available",
) -> Listing:
    """Insert a new listing with empty rating statistics."""

    if availability not in AVAILABILITY_STATUSES:
        raise ValueError(f"Unsupported availability '{availability}'")

    db = get_db()
    cursor = execute(
        db,
        """
        INSERT INTO listings (
            owner_id, title, description, price, address, zip_code, country,
            bedrooms, distance_from_campus, lease_duration, images, availability
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            owner_id,
            title,
            description,
            price,
            address,
            zip_code,
            country,
            bedrooms,
            distance_from_campus,
            lease_duration,
            _encode_images(images),
            availability,
        ),
    )
    return get_listing_by_id(cursor.lastrowid, connection=db)


def get_listing_by_id(listing_id: int, connection=None) -> Listing | None:
    """Fetch a single listing."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM listings WHERE listing_id = ?",
        (listing_id,),
    )
    return _row_to_listing(row) if row else None


def list_listings(
    keyword: Optional[str] = None,
    availability: Optional[str] = None,
    max_price: Optional[float] = None,
    min_bedrooms: Optional[int] = None,
) -> list[Listing]:
    """Return listings newest first, filtered by simple substring matching."""

    db = get_db()
    query = "SELECT * FROM listings WHERE 1 = 1"
    params: list = []
    if keyword:
        query += " AND (title LIKE ? OR description LIKE ? OR address LIKE ?)"
        like_term = f"%{keyword}%"
        params.extend([like_term, like_term, like_term])
    if availability:
        query += " AND availability = ?"
        params.append(availability)
    if max_price is not None:
        query += " AND price <= ?"
        params.append(max_price)
    if min_bedrooms is not None:
        query += " AND bedrooms >= ?"
        params.append(min_bedrooms)
    query += " ORDER BY created_at DESC, listing_id DESC"
    rows = query_all(db, query, params)
    return [_row_to_listing(row) for row in rows]


def list_listings_for_owner(owner_id: int) -> list[Listing]:
    """Return all listings created by a specific owner."""

    db = get_db()
    rows = query_all(
        db,
        """
        SELECT * FROM listings
        WHERE owner_id = ?
        ORDER BY created_at DESC, listing_id DESC
        """,
        (owner_id,),
    )
    return [_row_to_listing(row) for row in rows]


def list_listing_ids() -> list[int]:
    db = get_db()
    rows = query_all(db, "SELECT listing_id FROM listings ORDER BY listing_id ASC")
    return [row["listing_id"] for row in rows]


def get_listing_titles(listing_ids: Iterable[int]) -> dict[int, str]:
    """Resolve titles for many listings at once; missing ids are absent."""

    ids = sorted(set(listing_ids))
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    db = get_db()
    rows = query_all(
        db,
        f"SELECT listing_id, title FROM listings WHERE listing_id IN ({placeholders})",
        ids,
    )
    return {row["listing_id"]: row["title"] for row in rows}


def update_listing(listing_id: int, **fields) -> None:
    """Update owner-editable fields; derived rating fields are ignored."""

    updates = {key: value for key, value in fields.items() if key in MUTABLE_FIELDS}
    if not updates:
        return
    if "availability" in updates and updates["availability"] not in AVAILABILITY_STATUSES:
        raise ValueError(f"Unsupported availability '{updates['availability']}'")
    if "images" in updates:
        updates["images"] = _encode_images(updates["images"])

    columns = ", ".join(f"{key} = ?" for key in updates.keys())
    params = list(updates.values()) + [listing_id]
    db = get_db()
    execute(db, f"UPDATE listings SET {columns} WHERE listing_id = ?", params)


def refresh_rating_stats(listing_id: int) -> bool:
    """Rewrite the derived rating fields from the reviews stored right now.

    Count, sum and write happen in one UPDATE, so the row always reflects the
    review set visible when the statement ran and the last refresh after any
    burst of review writes wins with the complete set. The average is the
    mean rounded half-up to one decimal in integer arithmetic:
    ``floor((20 * total + count) / (2 * count)) / 10``.

    Returns False when the listing is gone.
    """

    db = get_db()
    cursor = execute(
        db,
        """
        UPDATE listings
        SET review_count = (
                SELECT COUNT(*) FROM reviews WHERE reviews.listing_id = listings.listing_id
            ),
            average_rating = COALESCE(
                (
                    SELECT CAST((20 * SUM(rating) + COUNT(*)) / (2 * COUNT(*)) AS REAL) / 10
                    FROM reviews
                    WHERE reviews.listing_id = listings.listing_id
                ),
                0
            )
        WHERE listing_id = ?
        """,
        (listing_id,),
    )
    return cursor.rowcount > 0


def delete_listing(listing_id: int) -> None:
    """Remove a listing; its reviews cascade."""

    db = get_db()
    execute(db, "DELETE FROM listings WHERE listing_id = ?", (listing_id,))
