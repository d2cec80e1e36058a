"""Rating aggregation for listings.

The average rating and review count stored on a listing are a cache of the
review table. They are recomputed from the persisted reviews after every
review mutation commits, in one statement that counts and writes together, so
the recompute that runs after the last write always reflects every committed
review even when mutations race.
"""

from __future__ import annotations

import sqlite3
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from flask import current_app

from ..data_access import listings_dao, reviews_dao
from .errors import AggregationFailure

ONE_DECIMAL = Decimal("0.1")


class RatingSummary(NamedTuple):
    average_rating: float
    review_count: int


def average_from_totals(review_count: int, rating_total: int) -> float:
    """Mean rating rounded half-up to one decimal place, 0 when unreviewed."""

    if review_count <= 0:
        return 0.0
    mean = Decimal(rating_total) / Decimal(review_count)
    return float(mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def compute(listing_id: int) -> RatingSummary:
    """Read the current review set and return the stats it implies."""

    stats = reviews_dao.rating_stats(listing_id)
    return RatingSummary(
        average_rating=average_from_totals(stats.review_count, stats.rating_total),
        review_count=stats.review_count,
    )


def recompute(listing_id: int) -> RatingSummary | None:
    """Recompute and persist the derived rating fields of a listing.

    The count and the average are derived and written by a single UPDATE, so
    a review written while another recompute is in flight can never be
    overwritten by stats read before it landed.

    Returns the persisted summary, or None when the listing no longer exists.
    Storage errors are surfaced as :class:`AggregationFailure`.
    """

    try:
        updated = listings_dao.refresh_rating_stats(listing_id)
        listing = listings_dao.get_listing_by_id(listing_id) if updated else None
    except sqlite3.Error as exc:
        raise AggregationFailure(listing_id) from exc

    if listing is None:
        current_app.logger.warning(
            "Skipped rating update for listing %s: listing no longer exists", listing_id
        )
        return None

    summary = RatingSummary(listing.average_rating, listing.review_count)
    current_app.logger.info(
        "Updated rating for listing %s: average=%.1f count=%d",
        listing_id,
        summary.average_rating,
        summary.review_count,
    )
    return summary


def recompute_all(dry_run: bool = False) -> list[tuple[int, RatingSummary, RatingSummary]]:
    """Reconcile every listing's cached rating with its reviews.

    Returns ``(listing_id, stored, actual)`` for each listing whose stored
    values differed. With ``dry_run`` nothing is written.
    """

    changed = []
    for listing_id in listings_dao.list_listing_ids():
        listing = listings_dao.get_listing_by_id(listing_id)
        if listing is None:
            continue
        stored = RatingSummary(listing.average_rating, listing.review_count)
        actual = compute(listing_id)
        if stored == actual:
            continue
        changed.append((listing_id, stored, actual))
        if not dry_run:
            recompute(listing_id)
    return changed
