"""Shared fixtures and factory helpers.

Uses an in-memory SQLite database, so no running Postgres is required.
Each test gets a completely fresh database (function-scoped engine).
"""

import pytest
from sqlalchemy import BigInteger, create_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session


# SQLite only auto-increments columns declared as `INTEGER PRIMARY KEY`.
# The models use `BigInteger` which renders as `BIGINT`, disabling auto-ID.
# Override the type for the sqlite dialect so all BigInteger columns
# become `INTEGER`, restoring auto-increment behaviour in tests.
@compiles(BigInteger, "sqlite")
def _sqlite_bigint(type_, compiler, **kwargs):  # noqa: ARG001
    return "INTEGER"

from bookreviews.db.base import Base
from bookreviews.db.crud import BookCRUD, ReviewCRUD, UserCRUD


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session():
    """Provide a fresh, isolated in-memory SQLite session for each test."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    with Session(engine, autoflush=False) as sess:
        yield sess
    engine.dispose()


# ---------------------------------------------------------------------------
# Factory helpers (plain functions, not fixtures, so tests can call them
# with custom arguments easily)
# ---------------------------------------------------------------------------


def make_user(
    session,
    email="alice@example.com",
    name="Alice",
    username="alice",
    password_hash="hashed_pw",
    **kwargs,
):
    return UserCRUD.create(
        session,
        email=email,
        name=name,
        username=username,
        password_hash=password_hash,
        **kwargs,
    )


def make_admin(session, email="admin@example.com", username="admin"):
    return make_user(session, email=email, name="Admin", username=username, role="admin")


def make_book(session, title="1984", author="George Orwell", **kwargs):
    return BookCRUD.create(session, title=title, author=author, **kwargs)


def make_review(
    session, user, book, rating=4, title="Great read", content="Loved every page.", **kwargs
):
    return ReviewCRUD.create(
        session,
        user_id=user.id,
        book_id=book.id,
        rating=rating,
        title=title,
        content=content,
        **kwargs,
    )
