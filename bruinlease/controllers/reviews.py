"""Reviews blueprint exposing listing feedback as JSON."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import IntegerField, TextAreaField
from wtforms.validators import InputRequired, Length, NumberRange, Optional

from ..data_access import users_dao
from ..models.entities import PublicUser
from ..services import reviews as review_service
from ..services.errors import NotFoundError

bp = Blueprint("reviews", __name__)


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class ReviewForm(FlaskForm):
    """Rating and narrative feedback for a new review."""

    rating = IntegerField("Rating", validators=[InputRequired(), NumberRange(min=1, max=5)])
    comment = TextAreaField(
        "Comment",
        filters=[_strip],
        validators=[InputRequired(), Length(min=10, max=500)],
    )


class ReviewUpdateForm(FlaskForm):
    """Partial update: either field may be omitted."""

    rating = IntegerField("Rating", validators=[Optional(), NumberRange(min=1, max=5)])
    comment = TextAreaField("Comment", filters=[_strip], validators=[Optional(), Length(min=10, max=500)])


def _with_authors(reviews) -> list[dict]:
    """Serialize reviews with the public identity of each author."""

    authors = users_dao.get_public_users(review.user_id for review in reviews)
    payload = []
    for review in reviews:
        data = review.to_dict()
        data["user"] = authors.get(review.user_id, PublicUser(review.user_id)).to_dict()
        payload.append(data)
    return payload


def _invalid(form: FlaskForm):
    return jsonify({"status": "error", "message": "Validation failed", "errors": form.errors}), 400


@bp.route("/listings/<int:listing_id>/reviews", methods=["GET"])
def list_reviews(listing_id: int):
    """Public list of reviews for a listing."""

    reviews = review_service.list_reviews(listing_id)
    return jsonify(
        {
            "status": "success",
            "results": len(reviews),
            "data": _with_authors(reviews),
        }
    )


@bp.route("/listings/<int:listing_id>/reviews", methods=["POST"])
@login_required
def create_review(listing_id: int):
    form = ReviewForm()
    if not form.validate_on_submit():
        return _invalid(form)

    review = review_service.create_review(
        listing_id=listing_id,
        author_id=current_user.user_id,
        rating=form.rating.data,
        comment=form.comment.data,
    )
    return jsonify({"status": "success", "data": _with_authors([review])[0]}), 201


@bp.route("/listings/<int:listing_id>/reviews/mine", methods=["GET"])
@login_required
def my_review(listing_id: int):
    review = review_service.get_my_review(listing_id, current_user.user_id)
    if review is None:
        raise NotFoundError("You have not reviewed this listing yet")
    return jsonify({"status": "success", "data": _with_authors([review])[0]})


@bp.route("/reviews/<int:review_id>", methods=["PUT"])
@login_required
def update_review(review_id: int):
    form = ReviewUpdateForm()
    if not form.validate_on_submit():
        return _invalid(form)

    review = review_service.update_review(
        review_id,
        current_user.user_id,
        rating=form.rating.data,
        comment=form.comment.data or None,
    )
    return jsonify({"status": "success", "data": _with_authors([review])[0]})


@bp.route("/reviews/<int:review_id>", methods=["DELETE"])
@login_required
def delete_review(review_id: int):
    review_service.delete_review(review_id, current_user.user_id)
    return jsonify({"status": "success", "message": "Review deleted successfully"})
