"""Conversation views derived from the flat message log.

Nothing about a conversation is stored: each call folds the viewer's
messages into one summary per counterpart.
"""

from __future__ import annotations

from ..data_access import messages_dao, users_dao
from ..models.entities import ConversationSummary, Message, PublicUser


def summarize(viewer_id: int, messages: list[Message]) -> list[ConversationSummary]:
    """Group newest-first ``messages`` by counterpart.

    Summaries come back in the order their partner was first met in the scan,
    so the most recently active conversation is first.
    """

    summaries: dict[int, ConversationSummary] = {}
    for message in messages:
        partner_id = message.partner_of(viewer_id)
        summary = summaries.get(partner_id)
        if summary is None:
            summary = ConversationSummary(partner=PublicUser(partner_id), last_message=message)
            summaries[partner_id] = summary
        summary.messages.append(message)
        summary.total_messages += 1
        if message.receiver_id == viewer_id and not message.read:
            summary.unread_count += 1

    partners = users_dao.get_public_users(summaries.keys())
    for partner_id, summary in summaries.items():
        if partner_id in partners:
            summary.partner = partners[partner_id]
    return list(summaries.values())


def list_conversations(viewer_id: int) -> list[ConversationSummary]:
    """One summary per counterpart the viewer has exchanged messages with."""

    return summarize(viewer_id, messages_dao.list_messages_for_user(viewer_id))


def get_conversation(viewer_id: int, partner_id: int) -> list[Message]:
    """All messages between the viewer and a partner, oldest first."""

    return messages_dao.list_messages_between(viewer_id, partner_id)
