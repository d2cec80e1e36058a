"""Data access helpers for direct messages."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.entities import Message
from .db import execute, get_db, query_all, query_one


def _parse(value: Optional[str]) -> datetime | None:
    return datetime.fromisoformat(value.replace(" ", "T")) if value else None


def _row_to_message(row) -> Message:
    return Message(
        message_id=row["message_id"],
        sender_id=row["sender_id"],
        receiver_id=row["receiver_id"],
        listing_id=row["listing_id"],
        content=row["content"],
        read=bool(row["is_read"]),
        read_at=_parse(row["read_at"]),
        created_at=_parse(row["created_at"]),
    )


def create_message(
    sender_id: int,
    receiver_id: int,
    content: str,
    listing_id: Optional[int] = None,
) -> Message:
    """Insert a new unread message."""

    db = get_db()
    cursor = execute(
        db,
        """
        INSERT INTO messages (sender_id, receiver_id, listing_id, content)
        VALUES (?, ?, ?, ?)
        """,
        (sender_id, receiver_id, listing_id, content),
    )
    return get_message_by_id(cursor.lastrowid, connection=db)


def get_message_by_id(message_id: int, connection=None) -> Message | None:
    """Fetch a single message."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM messages WHERE message_id = ?",
        (message_id,),
    )
    return _row_to_message(row) if row else None


def list_messages_for_user(user_id: int) -> list[Message]:
    """Return every message the user sent or received, newest first."""

    db = get_db()
    rows = query_all(
        db,
        """
        SELECT * FROM messages
        WHERE sender_id = ? OR receiver_id = ?
        ORDER BY created_at DESC, message_id DESC
        """,
        (user_id, user_id),
    )
    return [_row_to_message(row) for row in rows]


def list_messages_between(user_id: int, partner_id: int) -> list[Message]:
    """Return the exchange between two users ordered ascending."""

    db = get_db()
    rows = query_all(
        db,
        """
        SELECT * FROM messages
        WHERE (sender_id = ? AND receiver_id = ?)
           OR (sender_id = ? AND receiver_id = ?)
        ORDER BY created_at ASC, message_id ASC
        """,
        (user_id, partner_id, partner_id, user_id),
    )
    return [_row_to_message(row) for row in rows]


def mark_read(receiver_id: int, sender_id: int) -> int:
    """Flag unread messages from ``sender_id`` to ``receiver_id`` as read.

    Returns the number of rows that changed.
    """

    db = get_db()
    cursor = execute(
        db,
        """
        UPDATE messages
        SET is_read = 1, read_at = strftime('%Y-%m-%d %H:%M:%f', 'now')
        WHERE sender_id = ? AND receiver_id = ? AND is_read = 0
        """,
        (sender_id, receiver_id),
    )
    return cursor.rowcount


def count_unread(user_id: int) -> int:
    db = get_db()
    row = query_one(
        db,
        "SELECT COUNT(*) AS total FROM messages WHERE receiver_id = ? AND is_read = 0",
        (user_id,),
    )
    return row["total"]


def delete_message(message_id: int) -> None:
    db = get_db()
    execute(db, "DELETE FROM messages WHERE message_id = ?", (message_id,))
