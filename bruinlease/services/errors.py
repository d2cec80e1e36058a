"""Error kinds raised by the review and messaging services."""

from __future__ import annotations


class CoreError(RuntimeError):
    """Base class carrying the status code the HTTP layer should answer with."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(CoreError):
    """Referenced listing, review, user or message does not exist."""

    status_code = 404
    default_message = "Resource not found"


class ForbiddenError(CoreError):
    """Actor may not perform the operation."""

    status_code = 403
    default_message = "Not authorized to perform this action"


class ConflictError(CoreError):
    """Operation would break a uniqueness invariant or a business rule."""

    status_code = 409
    default_message = "The request conflicts with existing data"


class InvalidInputError(CoreError):
    """A field failed validation."""

    status_code = 400
    default_message = "Invalid input"


class AggregationFailure(CoreError):
    """A listing's derived rating could not be persisted."""

    status_code = 500
    default_message = "Unable to update listing rating"

    def __init__(self, listing_id: int, message: str | None = None) -> None:
        self.listing_id = listing_id
        super().__init__(message or f"Unable to update rating for listing {listing_id}")
