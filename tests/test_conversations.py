"""Conversation projection and read-state tests."""

from __future__ import annotations

from bruinlease.data_access import listings_dao, users_dao
from bruinlease.services import conversations, messages, read_state


def test_listing_inquiry_conversation(app, strangers):
    """Three inquiries and one reply collapse into a single summary."""

    drew, emery = strangers
    with app.app_context():
        listing = listings_dao.list_listings(keyword="Palms")[0]
        for text in ("Is it still available?", "Can I visit Friday?", "Are pets allowed?"):
            messages.send_message(drew.user_id, emery.user_id, text, listing_id=listing.listing_id)
        reply = messages.send_message(emery.user_id, drew.user_id, "Yes to all three!", listing_id=listing.listing_id)

        summaries = conversations.list_conversations(emery.user_id)
        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.partner.user_id == drew.user_id
        assert summary.partner.name == "Drew Dweller"
        assert summary.unread_count == 3
        assert summary.total_messages == 4
        assert summary.last_message.message_id == reply.message_id

        assert read_state.mark_read(emery.user_id, drew.user_id) == {"modified_count": 3}
        assert conversations.list_conversations(emery.user_id)[0].unread_count == 0


def test_partner_is_the_other_participant(app, strangers):
    drew, emery = strangers
    with app.app_context():
        messages.send_message(drew.user_id, emery.user_id, "Hello from Drew")

        drew_view = conversations.list_conversations(drew.user_id)
        emery_view = conversations.list_conversations(emery.user_id)
        assert drew_view[0].partner.user_id == emery.user_id
        assert emery_view[0].partner.user_id == drew.user_id
        # Messages the viewer sent never count as unread for them.
        assert drew_view[0].unread_count == 0
        assert emery_view[0].unread_count == 1


def test_conversations_ordered_by_latest_activity(app, strangers, bella, carlos):
    drew, _ = strangers
    with app.app_context():
        messages.send_message(bella.user_id, drew.user_id, "First from Bella")
        messages.send_message(carlos.user_id, drew.user_id, "First from Carlos")
        messages.send_message(drew.user_id, bella.user_id, "Reply to Bella")

        summaries = conversations.list_conversations(drew.user_id)
        assert [summary.partner.user_id for summary in summaries] == [bella.user_id, carlos.user_id]
        assert summaries[0].last_message.content == "Reply to Bella"
        assert [m.content for m in summaries[0].messages] == ["Reply to Bella", "First from Bella"]


def test_user_without_messages_has_no_conversations(app, strangers):
    drew, _ = strangers
    with app.app_context():
        assert conversations.list_conversations(drew.user_id) == []
        assert conversations.get_conversation(drew.user_id, 12345) == []


def test_unresolvable_partner_keeps_identifier(app, strangers, monkeypatch):
    drew, emery = strangers
    with app.app_context():
        messages.send_message(emery.user_id, drew.user_id, "Before I delete my account")
        monkeypatch.setattr(users_dao, "get_public_users", lambda ids: {})
        summary = conversations.list_conversations(drew.user_id)[0]
        assert summary.partner.user_id == emery.user_id
        assert summary.partner.name is None


def test_get_conversation_is_oldest_first_and_pair_scoped(app, strangers, bella):
    drew, emery = strangers
    with app.app_context():
        first = messages.send_message(drew.user_id, emery.user_id, "One")
        second = messages.send_message(emery.user_id, drew.user_id, "Two")
        messages.send_message(drew.user_id, bella.user_id, "Unrelated")
        third = messages.send_message(drew.user_id, emery.user_id, "Three")

        thread = conversations.get_conversation(emery.user_id, drew.user_id)
        assert [m.message_id for m in thread] == [first.message_id, second.message_id, third.message_id]
        assert thread == conversations.get_conversation(drew.user_id, emery.user_id)


def test_mark_read_is_idempotent_and_directional(app, strangers):
    drew, emery = strangers
    with app.app_context():
        messages.send_message(drew.user_id, emery.user_id, "Ping")
        messages.send_message(drew.user_id, emery.user_id, "Ping again")
        messages.send_message(emery.user_id, drew.user_id, "Pong")

        assert read_state.unread_count(emery.user_id) == 2
        assert read_state.unread_count(drew.user_id) == 1

        assert read_state.mark_read(emery.user_id, drew.user_id) == {"modified_count": 2}
        assert read_state.mark_read(emery.user_id, drew.user_id) == {"modified_count": 0}

        assert read_state.unread_count(emery.user_id) == 0
        # Drew's unread reply is untouched by Emery reading.
        assert read_state.unread_count(drew.user_id) == 1

        thread = conversations.get_conversation(emery.user_id, drew.user_id)
        received = [m for m in thread if m.receiver_id == emery.user_id]
        assert all(m.read and m.read_at is not None for m in received)
        sent = [m for m in thread if m.sender_id == emery.user_id]
        assert all(not m.read and m.read_at is None for m in sent)
