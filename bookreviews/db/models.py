from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
    true,
)
from sqlalchemy.orm import (
    Mapped,
    mapped_column,
    relationship,
)
from .base import Base

USER_ROLES = ("user", "admin")
READING_STATUSES = ("Want to Read", "Currently Reading", "Read", "DNF")
REVIEW_FORMATS = ("Hardcover", "Paperback", "E-book", "Audiobook", "Other")
CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "INR")
VOTE_KINDS = ("helpful", "like")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("reviews_count >= 0", name="ck_users_reviews_count_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(Text)
    bio: Mapped[str | None] = mapped_column(String(500))
    avatar: Mapped[str | None] = mapped_column(String(1000))
    favorite_genres: Mapped[list[str]] = mapped_column(JSON, default=list)
    role: Mapped[str] = mapped_column(String(20), default="user", server_default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())

    # Maintained incrementally by the review lifecycle, never by clients.
    reviews_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    reviews: Mapped[list["Review"]] = relationship(back_populates="user")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="ck_books_average_rating_range",
        ),
        CheckConstraint("total_ratings >= 0", name="ck_books_total_ratings_non_negative"),
        Index("ix_books_average_rating", "average_rating"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    title: Mapped[str] = mapped_column(String(200), index=True)
    author: Mapped[str] = mapped_column(String(100), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    genre: Mapped[str | None] = mapped_column(String(50), index=True)
    isbn: Mapped[str | None] = mapped_column(String(13), unique=True)
    publication_year: Mapped[int | None] = mapped_column(Integer)
    publisher: Mapped[str | None] = mapped_column(String(100))
    page_count: Mapped[int | None] = mapped_column(Integer)
    cover_image: Mapped[str | None] = mapped_column(String(1000))

    # Derived from active reviews; written only by the rating aggregator.
    average_rating: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    reviews: Mapped[list["Review"]] = relationship(back_populates="book")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_reviews_user_book"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_reviews_price_non_negative"),
        Index("ix_reviews_book_created", "book_id", "created_at"),
        Index("ix_reviews_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)
    rating: Mapped[int] = mapped_column(Integer, index=True)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text)
    spoiler_alert: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    reading_status: Mapped[str] = mapped_column(String(30), default="Read", server_default="Read")
    format: Mapped[str] = mapped_column(String(20), default="Paperback", server_default="Paperback")
    purchase_source: Mapped[str | None] = mapped_column(String(100))
    price: Mapped[float | None] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="USD", server_default="USD")
    read_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true(), index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    user: Mapped["User"] = relationship(back_populates="reviews")
    book: Mapped["Book"] = relationship(back_populates="reviews")
    votes: Mapped[list["ReviewVote"]] = relationship(
        back_populates="review",
        cascade="all, delete-orphan",
    )


class ReviewVote(Base):
    """One member of a review's helpful or like voter set.

    The rows for a ``(review_id, kind)`` pair are the voter set; its size is
    the count, so there is no separately stored counter to drift.
    """

    __tablename__ = "review_votes"
    __table_args__ = (
        CheckConstraint("kind IN ('helpful', 'like')", name="ck_review_votes_kind"),
        Index("ix_review_votes_review_kind", "review_id", "kind"),
    )

    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    kind: Mapped[str] = mapped_column(String(10), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    review: Mapped["Review"] = relationship(back_populates="votes")
