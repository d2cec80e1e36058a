"""Direct messaging between members about listings."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import IntegerField, TextAreaField
from wtforms.validators import InputRequired, Length, Optional

from ..data_access import listings_dao, users_dao
from ..models.entities import PublicUser
from ..services import conversations, messages, read_state

bp = Blueprint("messaging", __name__, url_prefix="/messages")


class MessageForm(FlaskForm):
    """Form for sending a message."""

    receiver_id = IntegerField("Receiver", validators=[InputRequired()])
    listing_id = IntegerField("Listing", validators=[Optional()])
    content = TextAreaField(
        "Message",
        filters=[lambda value: value.strip() if isinstance(value, str) else value],
        validators=[InputRequired(), Length(min=1, max=1000)],
    )


def _present(thread) -> list[dict]:
    """Serialize messages with both participants and the listing they concern.

    Identities and titles are resolved once for the whole batch.
    """

    people = users_dao.get_public_users(
        user_id for message in thread for user_id in (message.sender_id, message.receiver_id)
    )
    titles = listings_dao.get_listing_titles(
        message.listing_id for message in thread if message.listing_id is not None
    )
    payload = []
    for message in thread:
        data = message.to_dict()
        data["sender"] = people.get(message.sender_id, PublicUser(message.sender_id)).to_dict()
        data["receiver"] = people.get(message.receiver_id, PublicUser(message.receiver_id)).to_dict()
        if message.listing_id is None:
            data["listing"] = None
        else:
            data["listing"] = {"listing_id": message.listing_id, "title": titles.get(message.listing_id)}
        payload.append(data)
    return payload


@bp.route("/", methods=["POST"])
@login_required
def send():
    form = MessageForm()
    if not form.validate_on_submit():
        return jsonify({"status": "error", "message": "Validation failed", "errors": form.errors}), 400

    message = messages.send_message(
        sender_id=current_user.user_id,
        receiver_id=form.receiver_id.data,
        content=form.content.data,
        listing_id=form.listing_id.data,
    )
    return jsonify({"status": "success", "data": _present([message])[0]}), 201


@bp.route("/conversations")
@login_required
def inbox():
    """List one summary per counterpart, most recent activity first."""

    summaries = conversations.list_conversations(current_user.user_id)
    data = [summary.to_dict() for summary in summaries]
    for item, last_message in zip(data, _present([summary.last_message for summary in summaries])):
        item["last_message"] = last_message
    return jsonify(
        {
            "status": "success",
            "results": len(summaries),
            "data": data,
        }
    )


@bp.route("/conversation/<int:user_id>")
@login_required
def conversation(user_id: int):
    thread = conversations.get_conversation(current_user.user_id, user_id)
    return jsonify(
        {
            "status": "success",
            "results": len(thread),
            "data": _present(thread),
        }
    )


@bp.route("/read/<int:user_id>", methods=["PUT"])
@login_required
def mark_read(user_id: int):
    result = read_state.mark_read(current_user.user_id, user_id)
    return jsonify(
        {
            "status": "success",
            "message": f"{result['modified_count']} messages marked as read",
            "data": result,
        }
    )


@bp.route("/unread/count")
@login_required
def unread_count():
    return jsonify({"status": "success", "data": {"unread_count": read_state.unread_count(current_user.user_id)}})


@bp.route("/<int:message_id>", methods=["DELETE"])
@login_required
def delete(message_id: int):
    messages.delete_message(message_id, current_user.user_id)
    return jsonify({"status": "success", "message": "Message deleted successfully"})
