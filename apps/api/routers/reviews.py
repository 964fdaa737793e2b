from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bookreviews.db.models import User
from bookreviews.reviews import (
    create_review,
    delete_review,
    toggle_helpful,
    toggle_like,
    update_review,
)

from ..core.deps import Pagination, get_current_user, get_db, get_optional_user
from ..core.review_queries import list_reviews_page, load_review, serialize_reviews_with_votes
from ..schemas.review import CreateReviewRequest, ReviewOut, ToggleOut, UpdateReviewRequest

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _serialize_one(db: Session, review_id: int, current_user_id: int | None) -> dict:
    review = load_review(db, review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return serialize_reviews_with_votes(db, [review], current_user_id)[0]


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def post_review(
    body: CreateReviewRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = create_review(
        db,
        user_id=current_user.id,
        book_id=body.bookId,
        **body.to_columns(exclude={"bookId"}),
    )
    db.commit()
    return _serialize_one(db, review.id, current_user.id)


@router.get("")
def list_reviews(
    pagination: Pagination = Depends(),
    bookId: int | None = Query(None),
    userId: int | None = Query(None),
    rating: int | None = Query(None, ge=1, le=5),
    sortBy: Literal["createdAt", "rating", "helpful", "likes"] = Query("createdAt"),
    sortOrder: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return list_reviews_page(
        db,
        pagination,
        current_user_id=current_user.id if current_user else None,
        book_id=bookId,
        user_id=userId,
        rating=rating,
        sort_by=sortBy,
        sort_order=sortOrder,
    )


@router.get("/{review_id}", response_model=ReviewOut)
def get_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return _serialize_one(db, review_id, current_user.id if current_user else None)


@router.patch("/{review_id}", response_model=ReviewOut)
def patch_review(
    review_id: int,
    body: UpdateReviewRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    update_review(
        db,
        review_id,
        current_user.id,
        body.to_columns(),
        is_admin=current_user.is_admin,
    )
    db.commit()
    return _serialize_one(db, review_id, current_user.id)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_review(db, review_id, current_user.id, is_admin=current_user.is_admin)
    db.commit()


@router.post("/{review_id}/helpful", response_model=ToggleOut)
def mark_helpful(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = toggle_helpful(db, review_id, current_user.id)
    db.commit()
    return result.to_dict()


@router.post("/{review_id}/like", response_model=ToggleOut)
def like_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = toggle_like(db, review_id, current_user.id)
    db.commit()
    return result.to_dict()
