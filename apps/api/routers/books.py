from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bookreviews.db.crud import BookCRUD
from bookreviews.db.models import Book, User
from bookreviews.reviews import recompute_rating

from ..core.deps import Pagination, get_db, get_optional_user, require_admin
from ..core.review_queries import list_reviews_page
from ..core.serialize import serialize_book
from ..schemas.book import (
    BookOut,
    CreateBookRequest,
    GenreCountOut,
    RatingSummaryOut,
    UpdateBookRequest,
)

router = APIRouter(prefix="/books", tags=["books"])


def _load_active_book(db: Session, book_id: int) -> Book:
    book = BookCRUD.get_active(db, book_id)
    if book is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return book


@router.get("")
def list_books(
    pagination: Pagination = Depends(),
    q: str | None = Query(None, max_length=100),
    genre: str | None = Query(None, max_length=50),
    minRating: float | None = Query(None, ge=0, le=5),
    maxRating: float | None = Query(None, ge=0, le=5),
    sortBy: Literal[
        "createdAt", "title", "averageRating", "totalRatings", "publicationYear"
    ] = Query("createdAt"),
    sortOrder: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
):
    books, total = BookCRUD.list_active(
        db,
        query=q,
        genre=genre,
        min_rating=minRating,
        max_rating=maxRating,
        sort_by=sortBy,
        descending=sortOrder == "desc",
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return pagination.envelope([serialize_book(b) for b in books], total)


@router.get("/genres", response_model=list[GenreCountOut])
def list_genres(db: Session = Depends(get_db)):
    return [{"genre": genre, "count": n} for genre, n in BookCRUD.genre_counts(db)]


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: int, db: Session = Depends(get_db)):
    return serialize_book(_load_active_book(db, book_id))


@router.post("", response_model=BookOut, status_code=status.HTTP_201_CREATED)
def create_book(
    body: CreateBookRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        book = BookCRUD.create(db, created_by=admin.id, **body.to_columns())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    db.commit()
    return serialize_book(book)


@router.patch("/{book_id}", response_model=BookOut)
def update_book(
    book_id: int,
    body: UpdateBookRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    _load_active_book(db, book_id)
    try:
        book = BookCRUD.update(db, book_id, **body.to_columns())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    db.commit()
    return serialize_book(book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if not BookCRUD.deactivate(db, book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    db.commit()


@router.post("/{book_id}/rating", response_model=RatingSummaryOut)
def refresh_book_rating(
    book_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    summary = recompute_rating(db, book_id)
    db.commit()
    return summary.to_dict()


@router.get("/{book_id}/reviews")
def get_book_reviews(
    book_id: int,
    pagination: Pagination = Depends(),
    sortBy: Literal["createdAt", "rating", "helpful", "likes"] = Query("createdAt"),
    sortOrder: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    _load_active_book(db, book_id)
    return list_reviews_page(
        db,
        pagination,
        current_user_id=current_user.id if current_user else None,
        book_id=book_id,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
