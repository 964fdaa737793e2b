"""SQLAlchemy CRUD helpers for users, books, reviews and review votes.

This module provides lightweight, explicit CRUD classes per model in
``bookreviews.db.models``. All methods work with a SQLAlchemy ``Session`` and
flush on writes so IDs are available immediately. Nothing here commits; the
caller owns the transaction.

Derived fields (``Book.average_rating``, ``Book.total_ratings`` and
``User.reviews_count``) are deliberately not writable through ``create`` or
``update``. See ``bookreviews.reviews`` for the code that maintains them.
"""

from __future__ import annotations

import re

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .models import (
    CURRENCIES,
    READING_STATUSES,
    REVIEW_FORMATS,
    USER_ROLES,
    VOTE_KINDS,
    Book,
    Review,
    ReviewVote,
    User,
)

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
_ISBN_RE = re.compile(r"^(?:\d{10}|\d{13})$")

BOOK_DERIVED_FIELDS = frozenset({"average_rating", "total_ratings"})
BOOK_EDITABLE_FIELDS = frozenset({
    "title",
    "author",
    "description",
    "genre",
    "isbn",
    "publication_year",
    "publisher",
    "page_count",
    "cover_image",
})
REVIEW_EDITABLE_FIELDS = frozenset({
    "rating",
    "title",
    "content",
    "spoiler_alert",
    "reading_status",
    "format",
    "purchase_source",
    "price",
    "currency",
    "read_date",
    "tags",
})
BOOK_SORT_FIELDS = {
    "createdAt": Book.created_at,
    "title": Book.title,
    "averageRating": Book.average_rating,
    "totalRatings": Book.total_ratings,
    "publicationYear": Book.publication_year,
}


def _require_non_empty(value: str | None, field_name: str) -> str:
    """Validate that a string field is not None, empty, or whitespace-only."""
    if value is None:
        raise ValueError(f"{field_name} is required")
    value = str(value).strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    return value


def _require_max_length(value: str, field_name: str, max_length: int) -> str:
    if len(value) > max_length:
        raise ValueError(f"{field_name} must be at most {max_length} characters")
    return value


def _optional_text(value: str | None, field_name: str, max_length: int) -> str | None:
    """Strip an optional text field; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    return _require_max_length(value, field_name, max_length)


def _validate_email(email: str) -> str:
    """Validate basic email format and return the stripped value."""
    email = _require_non_empty(email, "email")
    if not _EMAIL_RE.match(email):
        raise ValueError(f"Invalid email format: {email!r}")
    return email.lower()


def _validate_username(username: str) -> str:
    username = _require_non_empty(username, "username")
    if not _USERNAME_RE.match(username):
        raise ValueError(
            "username must be 3-30 characters of letters, numbers, and underscores"
        )
    return username


def _validate_year(year: int | None) -> int | None:
    """Validate that a publication year is within a sane range, if provided."""
    if year is None:
        return None
    if not isinstance(year, int):
        raise ValueError(f"publication_year must be an integer, got {type(year).__name__}")
    if year < 1000 or year > 9999:
        raise ValueError(f"publication_year must be between 1000 and 9999, got {year}")
    return year


def _validate_isbn(isbn: str | None) -> str | None:
    if isbn is None:
        return None
    isbn = str(isbn).strip()
    if not isbn:
        return None
    if not _ISBN_RE.match(isbn):
        raise ValueError(f"isbn must be 10 or 13 digits, got {isbn!r}")
    return isbn


def _validate_rating(rating: int) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValueError(f"rating must be an integer, got {type(rating).__name__}")
    if not (1 <= rating <= 5):
        raise ValueError(f"rating must be between 1 and 5, got {rating}")
    return rating


def _validate_choice(value: str, field_name: str, choices: tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"{field_name} must be one of {', '.join(choices)}; got {value!r}")
    return value


def _validate_price(price: float | None) -> float | None:
    if price is None:
        return None
    if price < 0:
        raise ValueError(f"price must not be negative, got {price}")
    return float(price)


def _validate_tags(tags: list[str] | None, field_name: str = "tag") -> list[str]:
    if tags is None:
        return []
    cleaned: list[str] = []
    for tag in tags:
        tag = _require_non_empty(tag, field_name)
        cleaned.append(_require_max_length(tag, field_name, 50))
    # Keep order while removing duplicates.
    return list(dict.fromkeys(cleaned))


def _expire_cached(session: Session, model, ident, *attrs: str) -> None:
    """Expire attributes of an already-loaded row after a bulk UPDATE on it."""
    obj = session.identity_map.get(session.identity_key(model, ident))
    if obj is not None:
        session.expire(obj, list(attrs) or None)


def _check_unique(
    session: Session, model, field, value, label: str, exclude_id: int | None = None,
) -> None:
    """Pre-check a UNIQUE column, raising ValueError on conflict."""
    stmt = select(model).where(field == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if session.scalar(stmt) is not None:
        raise ValueError(f"{label} {value!r} is already taken")


def _clean_review_fields(fields: dict) -> dict:
    """Validate and normalize any subset of the editable review fields."""
    unknown = set(fields) - REVIEW_EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown review fields: {', '.join(sorted(unknown))}")
    cleaned = dict(fields)
    if "rating" in cleaned:
        cleaned["rating"] = _validate_rating(cleaned["rating"])
    if "title" in cleaned:
        cleaned["title"] = _require_max_length(
            _require_non_empty(cleaned["title"], "title"), "title", 200
        )
    if "content" in cleaned:
        cleaned["content"] = _require_max_length(
            _require_non_empty(cleaned["content"], "content"), "content", 5000
        )
    if "spoiler_alert" in cleaned:
        cleaned["spoiler_alert"] = bool(cleaned["spoiler_alert"])
    if "reading_status" in cleaned:
        cleaned["reading_status"] = _validate_choice(
            cleaned["reading_status"], "reading_status", READING_STATUSES
        )
    if "format" in cleaned:
        cleaned["format"] = _validate_choice(cleaned["format"], "format", REVIEW_FORMATS)
    if cleaned.get("purchase_source") is not None:
        cleaned["purchase_source"] = _require_max_length(
            str(cleaned["purchase_source"]).strip(), "purchase_source", 100
        )
    if "price" in cleaned:
        cleaned["price"] = _validate_price(cleaned["price"])
    if "currency" in cleaned:
        cleaned["currency"] = _validate_choice(cleaned["currency"], "currency", CURRENCIES)
    if "tags" in cleaned:
        cleaned["tags"] = _validate_tags(cleaned["tags"])
    return cleaned


class UserCRUD:
    @staticmethod
    def get_by_id(session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    @staticmethod
    def get_active(session: Session, user_id: int) -> User | None:
        user = session.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    @staticmethod
    def get_by_email(session: Session, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return session.scalar(stmt)

    @staticmethod
    def get_by_username(session: Session, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return session.scalar(stmt)

    @staticmethod
    def create(
        session: Session,
        email: str,
        name: str,
        username: str,
        password_hash: str,
        role: str = "user",
    ) -> User:
        email = _validate_email(email)
        name = _require_non_empty(name, "name")
        username = _validate_username(username)
        password_hash = _require_non_empty(password_hash, "password_hash")
        role = _validate_choice(role, "role", USER_ROLES)
        _check_unique(session, User, User.email, email, "email")
        _check_unique(session, User, User.username, username, "username")
        user = User(
            email=email,
            name=name,
            username=username,
            password_hash=password_hash,
            role=role,
        )
        session.add(user)
        session.flush()
        return user

    @staticmethod
    def update(session: Session, user_id: int, **kwargs) -> User:
        user = session.get(User, user_id)
        if not user:
            raise ValueError(f"User with id {user_id} not found")
        if "reviews_count" in kwargs:
            raise ValueError("reviews_count is derived and cannot be set directly")
        if "email" in kwargs:
            kwargs["email"] = _validate_email(kwargs["email"])
            _check_unique(session, User, User.email, kwargs["email"], "email", exclude_id=user_id)
        if "name" in kwargs:
            kwargs["name"] = _require_max_length(
                _require_non_empty(kwargs["name"], "name"), "name", 100
            )
        if "bio" in kwargs:
            kwargs["bio"] = _optional_text(kwargs["bio"], "bio", 500)
        if "avatar" in kwargs:
            kwargs["avatar"] = _optional_text(kwargs["avatar"], "avatar", 1000)
        if "favorite_genres" in kwargs:
            genres = _validate_tags(kwargs["favorite_genres"], "favorite genre")
            if len(genres) > 10:
                raise ValueError("favorite_genres must have at most 10 entries")
            kwargs["favorite_genres"] = genres
        if "username" in kwargs:
            kwargs["username"] = _validate_username(kwargs["username"])
            _check_unique(session, User, User.username, kwargs["username"], "username", exclude_id=user_id)
        if "password_hash" in kwargs:
            kwargs["password_hash"] = _require_non_empty(kwargs["password_hash"], "password_hash")
        if "role" in kwargs:
            kwargs["role"] = _validate_choice(kwargs["role"], "role", USER_ROLES)
        for key, value in kwargs.items():
            setattr(user, key, value)
        session.flush()
        return user

    @staticmethod
    def increment_reviews_count(session: Session, user_id: int) -> bool:
        """Atomically add one to the user's review count. Returns False if no such user."""
        result = session.execute(
            update(User)
            .where(User.id == user_id)
            .values(reviews_count=User.reviews_count + 1)
            .execution_options(synchronize_session=False)
        )
        _expire_cached(session, User, user_id, "reviews_count")
        return result.rowcount > 0

    @staticmethod
    def decrement_reviews_count(session: Session, user_id: int) -> bool:
        """Atomically subtract one, never below zero.

        Returns False when nothing was decremented (missing user or a count
        already at zero).
        """
        result = session.execute(
            update(User)
            .where(User.id == user_id, User.reviews_count > 0)
            .values(reviews_count=User.reviews_count - 1)
            .execution_options(synchronize_session=False)
        )
        _expire_cached(session, User, user_id, "reviews_count")
        return result.rowcount > 0


class BookCRUD:
    @staticmethod
    def get_by_id(session: Session, book_id: int) -> Book | None:
        return session.get(Book, book_id)

    @staticmethod
    def get_active(session: Session, book_id: int) -> Book | None:
        book = session.get(Book, book_id)
        if book is None or not book.is_active:
            return None
        return book

    @staticmethod
    def get_by_isbn(session: Session, isbn: str) -> Book | None:
        stmt = select(Book).where(Book.isbn == isbn)
        return session.scalar(stmt)

    @staticmethod
    def list_active(
        session: Session,
        *,
        query: str | None = None,
        genre: str | None = None,
        min_rating: float | None = None,
        max_rating: float | None = None,
        sort_by: str = "createdAt",
        descending: bool = True,
        offset: int = 0,
        limit: int = 12,
    ) -> tuple[list[Book], int]:
        """Page through the active catalog. Returns ``(books, total_matching)``.

        ``query`` matches title, author or description, case-insensitively.
        """
        if sort_by not in BOOK_SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {', '.join(BOOK_SORT_FIELDS)}")
        for label, bound in (("min_rating", min_rating), ("max_rating", max_rating)):
            if bound is not None and not (0 <= bound <= 5):
                raise ValueError(f"{label} must be between 0 and 5, got {bound}")

        filters = [Book.is_active.is_(True)]
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            filters.append(
                or_(
                    Book.title.ilike(pattern),
                    Book.author.ilike(pattern),
                    Book.description.ilike(pattern),
                )
            )
        if genre:
            filters.append(Book.genre == genre)
        if min_rating is not None:
            filters.append(Book.average_rating >= min_rating)
        if max_rating is not None:
            filters.append(Book.average_rating <= max_rating)

        total = session.scalar(select(func.count(Book.id)).where(*filters)) or 0

        key = BOOK_SORT_FIELDS[sort_by]
        order = key.desc() if descending else key.asc()
        stmt = (
            select(Book)
            .where(*filters)
            .order_by(order, Book.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return session.scalars(stmt).all(), int(total)

    @staticmethod
    def genre_counts(session: Session) -> list[tuple[str, int]]:
        """Active books per genre, most common first. Books without a genre are skipped."""
        n = func.count(Book.id)
        rows = session.execute(
            select(Book.genre, n)
            .where(Book.is_active.is_(True), Book.genre.is_not(None))
            .group_by(Book.genre)
            .order_by(n.desc(), Book.genre.asc())
        ).all()
        return [(genre, int(count)) for genre, count in rows]

    @staticmethod
    def _clean(session: Session, kwargs: dict, exclude_id: int | None = None) -> dict:
        derived = BOOK_DERIVED_FIELDS & set(kwargs)
        if derived:
            raise ValueError(
                f"{', '.join(sorted(derived))} is derived from reviews and cannot be set directly"
            )
        unknown = set(kwargs) - BOOK_EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        if "title" in kwargs:
            kwargs["title"] = _require_max_length(
                _require_non_empty(kwargs["title"], "title"), "title", 200
            )
        if "author" in kwargs:
            kwargs["author"] = _require_max_length(
                _require_non_empty(kwargs["author"], "author"), "author", 100
            )
        if "publication_year" in kwargs:
            kwargs["publication_year"] = _validate_year(kwargs["publication_year"])
        if "page_count" in kwargs and kwargs["page_count"] is not None and kwargs["page_count"] < 1:
            raise ValueError(f"page_count must be a positive integer, got {kwargs['page_count']}")
        if "isbn" in kwargs:
            kwargs["isbn"] = _validate_isbn(kwargs["isbn"])
            if kwargs["isbn"] is not None:
                _check_unique(session, Book, Book.isbn, kwargs["isbn"], "isbn", exclude_id=exclude_id)
        return kwargs

    @staticmethod
    def create(
        session: Session,
        title: str,
        author: str,
        created_by: int | None = None,
        **kwargs,
    ) -> Book:
        kwargs = BookCRUD._clean(session, {"title": title, "author": author, **kwargs})
        book = Book(created_by=created_by, average_rating=0.0, total_ratings=0, **kwargs)
        session.add(book)
        session.flush()
        return book

    @staticmethod
    def update(session: Session, book_id: int, **kwargs) -> Book:
        book = session.get(Book, book_id)
        if not book:
            raise ValueError(f"Book with id {book_id} not found")
        kwargs = BookCRUD._clean(session, kwargs, exclude_id=book_id)
        for key, value in kwargs.items():
            setattr(book, key, value)
        session.flush()
        return book

    @staticmethod
    def deactivate(session: Session, book_id: int) -> bool:
        """Soft-delete a book. Its reviews are left untouched."""
        book = session.get(Book, book_id)
        if not book or not book.is_active:
            return False
        book.is_active = False
        session.flush()
        return True

    @staticmethod
    def set_rating_summary(
        session: Session, book_id: int, average_rating: float, total_ratings: int
    ) -> bool:
        """Write the derived rating fields. Reserved for the rating aggregator."""
        result = session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(average_rating=average_rating, total_ratings=total_ratings)
            .execution_options(synchronize_session=False)
        )
        _expire_cached(session, Book, book_id, "average_rating", "total_ratings")
        return result.rowcount > 0


REVIEW_SORT_FIELDS = ("createdAt", "rating", "helpful", "likes")


class ReviewCRUD:
    @staticmethod
    def get_by_id(session: Session, review_id: int) -> Review | None:
        return session.get(Review, review_id)

    @staticmethod
    def get_active(session: Session, review_id: int) -> Review | None:
        review = session.get(Review, review_id)
        if review is None or not review.is_active:
            return None
        return review

    @staticmethod
    def get_by_user_and_book(session: Session, user_id: int, book_id: int) -> Review | None:
        """Return the review for (user, book) regardless of its active flag."""
        stmt = select(Review).where(Review.user_id == user_id, Review.book_id == book_id)
        return session.scalar(stmt)

    @staticmethod
    def rating_totals(session: Session, book_id: int) -> tuple[int, int]:
        """Return ``(sum_of_ratings, count)`` over the book's active reviews."""
        row = session.execute(
            select(
                func.coalesce(func.sum(Review.rating), 0),
                func.count(Review.id),
            ).where(Review.book_id == book_id, Review.is_active.is_(True))
        ).one()
        return int(row[0]), int(row[1])

    @staticmethod
    def user_rating_totals(session: Session, user_id: int) -> tuple[int, int]:
        """Return ``(sum_of_ratings, count)`` over the user's active reviews."""
        row = session.execute(
            select(
                func.coalesce(func.sum(Review.rating), 0),
                func.count(Review.id),
            ).where(Review.user_id == user_id, Review.is_active.is_(True))
        ).one()
        return int(row[0]), int(row[1])

    @staticmethod
    def user_genre_totals(
        session: Session, user_id: int, limit: int = 5
    ) -> list[tuple[str, int, int]]:
        """Return ``(genre, count, sum_of_ratings)`` for the user's most reviewed genres."""
        n = func.count(Review.id)
        rows = session.execute(
            select(Book.genre, n, func.sum(Review.rating))
            .join(Book, Book.id == Review.book_id)
            .where(
                Review.user_id == user_id,
                Review.is_active.is_(True),
                Book.genre.is_not(None),
            )
            .group_by(Book.genre)
            .order_by(n.desc(), Book.genre.asc())
            .limit(limit)
        ).all()
        return [(genre, int(count), int(total)) for genre, count, total in rows]

    @staticmethod
    def user_status_counts(session: Session, user_id: int) -> list[tuple[str, int]]:
        n = func.count(Review.id)
        rows = session.execute(
            select(Review.reading_status, n)
            .where(Review.user_id == user_id, Review.is_active.is_(True))
            .group_by(Review.reading_status)
            .order_by(n.desc(), Review.reading_status.asc())
        ).all()
        return [(status, int(count)) for status, count in rows]

    @staticmethod
    def create(
        session: Session,
        user_id: int,
        book_id: int,
        rating: int,
        title: str,
        content: str,
        **kwargs,
    ) -> Review:
        fields = _clean_review_fields(
            {"rating": rating, "title": title, "content": content, **kwargs}
        )
        fields.setdefault("tags", [])
        review = Review(user_id=user_id, book_id=book_id, **fields)
        session.add(review)
        session.flush()
        return review

    @staticmethod
    def update(session: Session, review_id: int, **kwargs) -> Review:
        review = session.get(Review, review_id)
        if not review:
            raise ValueError(f"Review with id {review_id} not found")
        for key, value in _clean_review_fields(kwargs).items():
            setattr(review, key, value)
        session.flush()
        return review

    @staticmethod
    def deactivate(session: Session, review_id: int) -> bool:
        review = session.get(Review, review_id)
        if not review or not review.is_active:
            return False
        review.is_active = False
        session.flush()
        return True

    @staticmethod
    def list_active(
        session: Session,
        *,
        book_id: int | None = None,
        user_id: int | None = None,
        rating: int | None = None,
        sort_by: str = "createdAt",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Review], int]:
        """Page through active reviews. Returns ``(reviews, total_matching)``."""
        if sort_by not in REVIEW_SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {', '.join(REVIEW_SORT_FIELDS)}")

        filters = [Review.is_active.is_(True)]
        if book_id is not None:
            filters.append(Review.book_id == book_id)
        if user_id is not None:
            filters.append(Review.user_id == user_id)
        if rating is not None:
            filters.append(Review.rating == rating)

        total = session.scalar(select(func.count(Review.id)).where(*filters)) or 0

        stmt = select(Review).where(*filters)
        if sort_by in ("helpful", "likes"):
            kind = "helpful" if sort_by == "helpful" else "like"
            votes_sq = (
                select(ReviewVote.review_id, func.count().label("n"))
                .where(ReviewVote.kind == kind)
                .group_by(ReviewVote.review_id)
                .subquery()
            )
            stmt = stmt.outerjoin(votes_sq, votes_sq.c.review_id == Review.id)
            key = func.coalesce(votes_sq.c.n, 0)
        elif sort_by == "rating":
            key = Review.rating
        else:
            key = Review.created_at
        order = key.desc() if descending else key.asc()
        stmt = stmt.order_by(order, Review.id.desc()).offset(offset).limit(limit)
        return session.scalars(stmt).all(), int(total)


class ReviewVoteCRUD:
    @staticmethod
    def _check_kind(kind: str) -> str:
        return _validate_choice(kind, "kind", VOTE_KINDS)

    @staticmethod
    def remove(session: Session, review_id: int, user_id: int, kind: str) -> bool:
        """Delete the membership row. Returns True if a row was removed."""
        kind = ReviewVoteCRUD._check_kind(kind)
        result = session.execute(
            delete(ReviewVote)
            .where(
                ReviewVote.review_id == review_id,
                ReviewVote.user_id == user_id,
                ReviewVote.kind == kind,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    @staticmethod
    def add(session: Session, review_id: int, user_id: int, kind: str) -> bool:
        """Insert the membership row, doing nothing if it already exists.

        Returns True if a row was inserted.
        """
        kind = ReviewVoteCRUD._check_kind(kind)
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(ReviewVote)
        elif dialect == "sqlite":
            stmt = sqlite_insert(ReviewVote)
        else:
            raise NotImplementedError(f"Unsupported dialect for vote upsert: {dialect}")
        stmt = stmt.values(
            review_id=review_id, user_id=user_id, kind=kind
        ).on_conflict_do_nothing(
            index_elements=["review_id", "user_id", "kind"]
        )
        result = session.execute(stmt)
        return result.rowcount > 0

    @staticmethod
    def count(session: Session, review_id: int, kind: str) -> int:
        kind = ReviewVoteCRUD._check_kind(kind)
        stmt = select(func.count()).select_from(ReviewVote).where(
            ReviewVote.review_id == review_id, ReviewVote.kind == kind
        )
        return int(session.scalar(stmt) or 0)

    @staticmethod
    def counts_for_reviews(session: Session, review_ids: list[int]) -> dict[int, dict[str, int]]:
        unique_ids = list(dict.fromkeys(review_ids))
        result = {rid: {kind: 0 for kind in VOTE_KINDS} for rid in unique_ids}
        if not unique_ids:
            return result
        rows = session.execute(
            select(ReviewVote.review_id, ReviewVote.kind, func.count())
            .where(ReviewVote.review_id.in_(unique_ids))
            .group_by(ReviewVote.review_id, ReviewVote.kind)
        ).all()
        for review_id, kind, n in rows:
            result[int(review_id)][kind] = int(n)
        return result

    @staticmethod
    def received_counts(session: Session, user_id: int) -> dict[str, int]:
        """Votes of each kind received across the user's active reviews."""
        result = {kind: 0 for kind in VOTE_KINDS}
        rows = session.execute(
            select(ReviewVote.kind, func.count())
            .join(Review, Review.id == ReviewVote.review_id)
            .where(Review.user_id == user_id, Review.is_active.is_(True))
            .group_by(ReviewVote.kind)
        ).all()
        for kind, n in rows:
            result[kind] = int(n)
        return result

    @staticmethod
    def kinds_for_user(
        session: Session, review_ids: list[int], user_id: int
    ) -> dict[int, set[str]]:
        unique_ids = list(dict.fromkeys(review_ids))
        result: dict[int, set[str]] = {rid: set() for rid in unique_ids}
        if not unique_ids:
            return result
        rows = session.execute(
            select(ReviewVote.review_id, ReviewVote.kind).where(
                ReviewVote.review_id.in_(unique_ids), ReviewVote.user_id == user_id
            )
        ).all()
        for review_id, kind in rows:
            result[int(review_id)].add(kind)
        return result
