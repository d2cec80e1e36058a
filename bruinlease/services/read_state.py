"""Read/unread bookkeeping for received messages."""

from __future__ import annotations

from typing import TypedDict

from flask import current_app

from ..data_access import messages_dao


class MarkReadResult(TypedDict):
    modified_count: int


def mark_read(viewer_id: int, partner_id: int) -> MarkReadResult:
    """Mark everything ``partner_id`` sent to ``viewer_id`` as read.

    Messages the viewer sent are untouched. Calling again returns 0.
    """

    modified = messages_dao.mark_read(receiver_id=viewer_id, sender_id=partner_id)
    if modified:
        current_app.logger.debug(
            "Marked %d messages from user %s to user %s as read", modified, partner_id, viewer_id
        )
    return {"modified_count": modified}


def unread_count(user_id: int) -> int:
    return messages_dao.count_unread(user_id)
