"""API test fixtures.

The app reads its settings and builds its engine at import time, so the
environment is pinned before anything under ``apps.api`` is imported. Every
test gets its own in-memory SQLite database shared by all request sessions.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-for-hs256-signing-0123456789"
os.environ["JWT_EXPIRE_MINUTES"] = "60"
os.environ["CORS_ORIGINS"] = "http://localhost:5173"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apps.api.core.auth import create_token
from apps.api.core.deps import get_db
from apps.api.main import app
from bookreviews.db.base import Base
from bookreviews.db.session import create_db_engine
from tests.conftest import make_admin, make_book, make_user


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def _get_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(session_factory):
    """Two readers, an admin and one book. Returns their ids."""
    with session_factory() as session:
        alice = make_user(session)
        bob = make_user(session, email="bob@example.com", name="Bob", username="bob")
        admin = make_admin(session)
        book = make_book(session)
        ids = {"alice": alice.id, "bob": bob.id, "admin": admin.id, "book": book.id}
        session.commit()
    return ids


def auth_header(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_token(user_id)}"}
