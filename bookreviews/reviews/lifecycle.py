"""Create, edit and soft-delete reviews while keeping derived fields in sync.

Every write here is followed, in the same session, by the bookkeeping it
implies: the book's rating summary is recomputed and the author's
``reviews_count`` is adjusted. Nothing is committed; the caller commits once
all steps have succeeded, so a failed aggregation surfaces as a failed
request instead of a silently stale book.

After ``DuplicateReview`` raised from a unique-index violation the session
must be rolled back by the caller before it is reused.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookreviews.db.crud import REVIEW_EDITABLE_FIELDS, BookCRUD, ReviewCRUD, UserCRUD
from bookreviews.db.models import Review

from .aggregator import recompute_rating
from .errors import (
    BookNotFound,
    DuplicateReview,
    Forbidden,
    ReviewNotFound,
    UserNotFound,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


def _authorize(review: Review, requester_id: int, is_admin: bool) -> None:
    if review.user_id != requester_id and not is_admin:
        raise Forbidden(f"User {requester_id} may not modify review {review.id}")


def _get_active_review(session: Session, review_id: int) -> Review:
    review = ReviewCRUD.get_active(session, review_id)
    if review is None:
        raise ReviewNotFound(f"Review {review_id} not found")
    return review


def create_review(
    session: Session,
    user_id: int,
    book_id: int,
    rating: int,
    title: str,
    content: str,
    **optional: Any,
) -> Review:
    """Create the single review ``user_id`` may write for ``book_id``.

    Raises:
        ValidationFailed: malformed rating, title, content or optional fields.
        BookNotFound: the book is missing or inactive.
        UserNotFound: the author is missing or inactive.
        DuplicateReview: a review for (user, book) exists, active or not.
        AggregationFailed: the book's rating summary could not be written.
    """
    unknown = set(optional) - REVIEW_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Unknown review fields: {', '.join(sorted(unknown))}")

    if BookCRUD.get_active(session, book_id) is None:
        raise BookNotFound(f"Book {book_id} not found")
    if UserCRUD.get_active(session, user_id) is None:
        raise UserNotFound(f"User {user_id} not found")

    # The unique index is the real guard; this only gives the common case a
    # clean error without a failed INSERT.
    if ReviewCRUD.get_by_user_and_book(session, user_id, book_id) is not None:
        raise DuplicateReview(f"User {user_id} has already reviewed book {book_id}")

    if optional.get("reading_status", "Read") == "Read" and optional.get("read_date") is None:
        optional["read_date"] = datetime.now(timezone.utc)

    try:
        review = ReviewCRUD.create(
            session,
            user_id=user_id,
            book_id=book_id,
            rating=rating,
            title=title,
            content=content,
            **optional,
        )
    except IntegrityError as exc:
        raise DuplicateReview(
            f"User {user_id} has already reviewed book {book_id}"
        ) from exc
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc

    recompute_rating(session, book_id)
    if not UserCRUD.increment_reviews_count(session, user_id):
        raise UserNotFound(f"User {user_id} not found")

    logger.info("User %s reviewed book %s (review %s)", user_id, book_id, review.id)
    return review


def update_review(
    session: Session,
    review_id: int,
    requester_id: int,
    fields: dict[str, Any],
    *,
    is_admin: bool = False,
) -> Review:
    """Apply a partial update. Only keys present in ``fields`` are written.

    Raises:
        ReviewNotFound: the review is missing or inactive.
        Forbidden: requester is neither the author nor an administrator.
        ValidationFailed: a supplied field is malformed.
        AggregationFailed: the rating changed and the summary could not be written.
    """
    review = _get_active_review(session, review_id)
    _authorize(review, requester_id, is_admin)

    if not fields:
        return review

    try:
        ReviewCRUD.update(session, review_id, **fields)
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc

    if "rating" in fields:
        recompute_rating(session, review.book_id)

    logger.info(
        "Review %s updated by user %s (%s)",
        review_id,
        requester_id,
        ", ".join(sorted(fields)),
    )
    return review


def delete_review(
    session: Session,
    review_id: int,
    requester_id: int,
    *,
    is_admin: bool = False,
) -> None:
    """Soft-delete a review and undo its contribution to derived fields.

    Raises:
        ReviewNotFound: the review is missing or already inactive.
        Forbidden: requester is neither the author nor an administrator.
        AggregationFailed: the book's rating summary could not be written.
    """
    review = _get_active_review(session, review_id)
    _authorize(review, requester_id, is_admin)

    ReviewCRUD.deactivate(session, review_id)
    recompute_rating(session, review.book_id)

    if not UserCRUD.decrement_reviews_count(session, review.user_id):
        logger.warning(
            "reviews_count for user %s was already zero when deleting review %s; left at 0",
            review.user_id,
            review_id,
        )

    logger.info("Review %s deleted by user %s", review_id, requester_id)
