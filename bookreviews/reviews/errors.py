"""Domain exceptions for review bookkeeping."""


class ReviewsError(Exception):
    """Base exception for all review bookkeeping errors."""

    code = "reviews_error"


class NotFound(ReviewsError):
    """Entity is missing or soft-deleted."""

    code = "not_found"


class BookNotFound(NotFound):
    code = "book_not_found"


class ReviewNotFound(NotFound):
    code = "review_not_found"


class UserNotFound(NotFound):
    code = "user_not_found"


class Forbidden(ReviewsError):
    """Requester is neither the author nor an administrator."""

    code = "forbidden"


class DuplicateReview(ReviewsError):
    """A review for this (user, book) pair already exists, active or not."""

    code = "duplicate_review"


class ValidationFailed(ReviewsError, ValueError):
    """Malformed review input."""

    code = "validation_failed"


class AggregationFailed(ReviewsError):
    """Derived rating fields could not be persisted."""

    code = "aggregation_failed"
