"""Sending and deleting direct messages."""

from __future__ import annotations

from typing import Optional

from flask import current_app

from ..data_access import listings_dao, messages_dao, users_dao
from ..models.entities import Message
from .errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError


def validate_content(content) -> str:
    if not isinstance(content, str) or not content.strip():
        raise InvalidInputError("Message content cannot be empty")
    content = content.strip()
    limit = current_app.config["MESSAGE_MAX_LENGTH"]
    if len(content) > limit:
        raise InvalidInputError(f"Message content must be between 1 and {limit} characters")
    return content


def send_message(
    sender_id: int,
    receiver_id: int,
    content: str,
    listing_id: Optional[int] = None,
) -> Message:
    """Persist a message from ``sender_id`` to ``receiver_id``."""

    if sender_id == receiver_id:
        raise ConflictError("Cannot send message to yourself")
    content = validate_content(content)
    if users_dao.get_user_by_id(receiver_id) is None:
        raise NotFoundError("Receiver not found")
    if listing_id is not None and listings_dao.get_listing_by_id(listing_id) is None:
        raise NotFoundError("Listing not found")

    message = messages_dao.create_message(sender_id, receiver_id, content, listing_id)
    current_app.logger.debug("Message %s sent from user %s to user %s", message.message_id, sender_id, receiver_id)
    return message


def delete_message(message_id: int, actor_id: int) -> None:
    """Delete a message; only its sender may do so."""

    message = messages_dao.get_message_by_id(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if message.sender_id != actor_id:
        raise ForbiddenError("Not authorized to delete this message")
    messages_dao.delete_message(message_id)
