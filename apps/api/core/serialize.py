"""Helpers to serialize SQLAlchemy ORM models to API schema dicts."""

from __future__ import annotations

from datetime import datetime, timezone

from bookreviews.db.models import Book, Review, User


def relative_time(dt: datetime | None) -> str:
    if dt is None:
        return "just now"
    now = datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = now - dt
    seconds = int(delta.total_seconds())
    if seconds < 3600:
        m = max(1, seconds // 60)
        return f"{m}m ago"
    if seconds < 86400:
        h = seconds // 3600
        return f"{h}h ago"
    if seconds < 604800:
        d = seconds // 86400
        return f"{d}d ago"
    w = seconds // 604800
    return f"{w}w ago"


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "username": user.username,
        "displayName": user.name,
        "role": user.role,
        "bio": user.bio,
        "avatar": user.avatar,
        "favoriteGenres": list(user.favorite_genres or []),
        "reviewsCount": user.reviews_count,
    }


def serialize_book(book: Book) -> dict:
    return {
        "id": str(book.id),
        "title": book.title,
        "author": book.author,
        "description": book.description,
        "genre": book.genre,
        "isbn": book.isbn,
        "publicationYear": book.publication_year,
        "publisher": book.publisher,
        "pageCount": book.page_count,
        "coverImage": book.cover_image,
        "averageRating": book.average_rating,
        "totalRatings": book.total_ratings,
    }


def serialize_review(
    review: Review,
    *,
    helpful_count: int = 0,
    likes_count: int = 0,
    voted: set[str] | None = None,
) -> dict:
    voted = voted or set()
    return {
        "id": str(review.id),
        "user": serialize_user(review.user),
        "bookId": str(review.book_id),
        "rating": review.rating,
        "title": review.title,
        "content": review.content,
        "spoilerAlert": review.spoiler_alert,
        "readingStatus": review.reading_status,
        "format": review.format,
        "purchaseSource": review.purchase_source,
        "price": review.price,
        "currency": review.currency,
        "readDate": _iso(review.read_date),
        "tags": list(review.tags or []),
        "helpful": {"count": helpful_count, "isSetByMe": "helpful" in voted},
        "likes": {"count": likes_count, "isSetByMe": "like" in voted},
        "createdAt": _iso(review.created_at),
        "timestamp": relative_time(review.created_at),
    }
