import pytest

from bookreviews.db.session import _connect_args, _normalize_database_url, build_database_url


@pytest.mark.parametrize(
    "url",
    [
        "postgresql://u:p@db:5432/reviews",
        "postgres://u:p@db:5432/reviews",
        "postgresql+psycopg2://u:p@db:5432/reviews",
    ],
)
def test_normalize_forces_psycopg3(url):
    assert _normalize_database_url(url) == "postgresql+psycopg://u:p@db:5432/reviews"


def test_normalize_leaves_sqlite_alone():
    assert _normalize_database_url("sqlite://") == "sqlite://"


def test_build_url_prefers_database_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/reviews")
    assert build_database_url() == "postgresql+psycopg://u:p@db/reviews"


def test_build_url_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE_USER", "reader")
    monkeypatch.setenv("DATABASE_PW", "pw")
    monkeypatch.setenv("DATABASE_HOST", "db")
    monkeypatch.setenv("DATABASE_PORT", "5432")
    monkeypatch.setenv("DATABASE_NAME", "reviews")
    assert build_database_url() == "postgresql+psycopg://reader:pw@db:5432/reviews"


def test_connect_args_per_backend():
    assert _connect_args("postgresql+psycopg://u:p@db/reviews")["keepalives"] == 1
    assert _connect_args("sqlite://") == {"check_same_thread": False}
