"""Dataclass-style entity representations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

from flask_login import UserMixin

AVAILABILITY_STATUSES = ("Available", "Pending", "Rented")


@dataclass
class User(UserMixin):
    """User entity compatible with Flask-Login."""

    user_id: int
    name: str
    email: str
    password_hash: str
    created_at: datetime

    def get_id(self) -> str:
        return str(self.user_id)


@dataclass
class PublicUser:
    """The identity of a user that other members are allowed to see."""

    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Listing:
    """Rental listing posted by a member."""

    listing_id: int
    owner_id: int
    title: str
    description: str
    price: float
    address: str
    zip_code: str
    country: str
    bedrooms: int
    distance_from_campus: float
    lease_duration: str
    images: list[str]
    availability: str
    average_rating: float
    review_count: int
    created_at: datetime


@dataclass
class Review:
    """Rating and comment left on a listing by a non-owner."""

    review_id: int
    listing_id: int
    user_id: int
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class Message:
    """A directed message between two members, optionally about a listing."""

    message_id: int
    sender_id: int
    receiver_id: int
    listing_id: Optional[int]
    content: str
    read: bool
    read_at: Optional[datetime]
    created_at: datetime

    def partner_of(self, viewer_id: int) -> int:
        """Return the other participant relative to ``viewer_id``."""

        return self.receiver_id if self.sender_id == viewer_id else self.sender_id

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["read_at"] = self.read_at.isoformat() if self.read_at else None
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class ConversationSummary:
    """Computed view of all messages exchanged with one counterpart."""

    partner: PublicUser
    last_message: Message
    unread_count: int = 0
    total_messages: int = 0
    messages: list[Message] = field(default_factory=list, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "partner": self.partner.to_dict(),
            "last_message": self.last_message.to_dict(),
            "unread_count": self.unread_count,
            "total_messages": self.total_messages,
        }
