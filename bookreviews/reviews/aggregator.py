"""Rating aggregation for books.

Keeps ``Book.average_rating`` and ``Book.total_ratings`` in step with the
book's active reviews. This is the only code path that writes those fields.

Recomputation always reads the full current review set, so running it twice
for the same book (for example from two concurrent requests) is harmless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookreviews.db.crud import BookCRUD, ReviewCRUD

from .errors import AggregationFailed, BookNotFound

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class RatingSummary:
    average_rating: float
    total_ratings: int

    def to_dict(self) -> dict:
        return {"averageRating": self.average_rating, "totalRatings": self.total_ratings}


def round_rating(total: int, count: int) -> float:
    """Mean of ``count`` ratings summing to ``total``, rounded half away from zero to 0.1.

    Decimal arithmetic avoids binary float artefacts such as
    ``round(3.25, 1) == 3.2``.
    """
    if count <= 0:
        return 0.0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def recompute_rating(session: Session, book_id: int) -> RatingSummary:
    """Recompute and persist a book's rating summary from its active reviews.

    Raises:
        BookNotFound: no book row has ``book_id``. Inactive books are still
            recomputed; deactivating a book does not touch its reviews.
        AggregationFailed: the derived fields could not be written.
    """
    if BookCRUD.get_by_id(session, book_id) is None:
        raise BookNotFound(f"Book {book_id} not found")

    total, count = ReviewCRUD.rating_totals(session, book_id)
    summary = RatingSummary(average_rating=round_rating(total, count), total_ratings=count)

    try:
        BookCRUD.set_rating_summary(
            session,
            book_id,
            average_rating=summary.average_rating,
            total_ratings=summary.total_ratings,
        )
    except SQLAlchemyError as exc:
        logger.error("Persisting rating summary for book %s failed: %s", book_id, exc)
        raise AggregationFailed(f"Could not update rating summary for book {book_id}") from exc

    logger.debug(
        "Book %s rating summary: average=%s total=%s",
        book_id,
        summary.average_rating,
        summary.total_ratings,
    )
    return summary
