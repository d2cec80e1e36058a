"""Deterministic seed data for BruinLease."""

from __future__ import annotations

from ..services import messages, reviews
from . import listings_dao, messages_dao, users_dao

DEFAULT_PASSWORD = "Password123!"

USERS = [
    ("Olivia Owner", "olivia@ucla.edu"),
    ("Oscar Owner", "oscar@ucla.edu"),
    ("Bella Bruin", "bella@ucla.edu"),
    ("Carlos Cub", "carlos@ucla.edu"),
    ("Dana Dorm", "dana@ucla.edu"),
]

LISTINGS = [
    {
        "owner_email": "olivia@ucla.edu",
        "title": "Sunny Westwood Studio",
        "description": "Bright studio with a kitchenette, a ten minute walk from campus.",
        "price": 1850.0,
        "address": "10900 Strathmore Dr, Los Angeles, CA",
        "zip_code": "90024",
        "bedrooms": 0,
        "distance_from_campus": 0.4,
        "lease_duration": "12 months",
    },
    {
        "owner_email": "olivia@ucla.edu",
        "title": "Two Bedroom on Gayley",
        "description": "Shared two bedroom apartment with parking and in-unit laundry.",
        "price": 3200.0,
        "address": "500 Gayley Ave, Los Angeles, CA",
        "zip_code": "90024",
        "bedrooms": 2,
        "distance_from_campus": 0.6,
        "lease_duration": "9 months",
        "availability": "Pending",
    },
    {
        "owner_email": "oscar@ucla.edu",
        "title": "Palms Garden Room",
        "description": "Private room in a quiet house with a garden and bus access to campus.",
        "price": 1100.0,
        "address": "3400 Motor Ave, Los Angeles, CA",
        "zip_code": "90034",
        "bedrooms": 1,
        "distance_from_campus": 3.5,
        "lease_duration": "6 months",
    },
]

REVIEWS = [
    ("Palms Garden Room", "bella@ucla.edu", 4, "Quiet and clean, the garden is lovely."),
    ("Palms Garden Room", "carlos@ucla.edu", 5, "Great landlord and an easy commute."),
    ("Sunny Westwood Studio", "dana@ucla.edu", 3, "Small but the location makes up for it."),
]

MESSAGES = [
    ("bella@ucla.edu", "olivia@ucla.edu", "Sunny Westwood Studio", "Hi! Is the studio still available for fall?"),
    ("olivia@ucla.edu", "bella@ucla.edu", "Sunny Westwood Studio", "It is! Would you like to schedule a tour?"),
    ("carlos@ucla.edu", "oscar@ucla.edu", "Palms Garden Room", "Are utilities included in the rent?"),
]


def seed() -> None:
    """Populate the database with representative demo records.

    Reviews and messages go through the services so listing ratings are
    derived exactly as they are at runtime. Running twice is harmless.
    """

    users = {}
    for name, email in USERS:
        user = users_dao.get_user_by_email(email)
        if user is None:
            user = users_dao.create_user(name, email, users_dao.hash_password(DEFAULT_PASSWORD))
        users[email] = user

    listings = {}
    for entry in LISTINGS:
        owner = users[entry["owner_email"]]
        fields = {key: value for key, value in entry.items() if key != "owner_email"}
        existing = next(
            (item for item in listings_dao.list_listings_for_owner(owner.user_id) if item.title == entry["title"]),
            None,
        )
        listings[entry["title"]] = existing or listings_dao.create_listing(owner_id=owner.user_id, **fields)

    for title, email, rating, comment in REVIEWS:
        listing = listings[title]
        author = users[email]
        if reviews.get_my_review(listing.listing_id, author.user_id) is None:
            reviews.create_review(listing.listing_id, author.user_id, rating, comment)

    if not messages_dao.list_messages_for_user(users[MESSAGES[0][0]].user_id):
        for sender, receiver, title, content in MESSAGES:
            messages.send_message(
                users[sender].user_id,
                users[receiver].user_id,
                content,
                listing_id=listings[title].listing_id,
            )


if __name__ == "__main__":
    from ..app import create_app

    app = create_app()
    with app.app_context():
        seed()
    print("Seed data applied.")
