from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookreviews.db.crud import ReviewCRUD
from bookreviews.db.models import Review
from bookreviews.reviews import vote_counts, voted_kinds

from .deps import Pagination
from .serialize import serialize_review


def load_review(db: Session, review_id: int) -> Review | None:
    return db.scalar(
        select(Review)
        .where(Review.id == review_id, Review.is_active.is_(True))
        .options(selectinload(Review.user))
    )


def serialize_reviews_with_votes(
    db: Session, reviews: list[Review], current_user_id: int | None = None
) -> list[dict]:
    review_ids = [r.id for r in reviews]
    counts = vote_counts(db, review_ids)
    mine = voted_kinds(db, review_ids, current_user_id)
    return [
        serialize_review(
            r,
            helpful_count=counts[r.id]["helpful"],
            likes_count=counts[r.id]["like"],
            voted=mine.get(r.id),
        )
        for r in reviews
    ]


def list_reviews_page(
    db: Session,
    pagination: Pagination,
    *,
    current_user_id: int | None = None,
    book_id: int | None = None,
    user_id: int | None = None,
    rating: int | None = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    reviews, total = ReviewCRUD.list_active(
        db,
        book_id=book_id,
        user_id=user_id,
        rating=rating,
        sort_by=sort_by,
        descending=sort_order == "desc",
        offset=pagination.offset,
        limit=pagination.limit,
    )
    items = serialize_reviews_with_votes(db, reviews, current_user_id)
    return pagination.envelope(items, total)
