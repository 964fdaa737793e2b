"""Engine and session factory for the reviews database.

Postgres (psycopg v3) in deployments, SQLite for tests and local runs.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

# Resolve .env relative to this file so it works regardless of CWD.
# Searches: <repo_root>/apps/api/.env, then <repo_root>/.env, then CWD/.env.
_repo_root = Path(__file__).resolve().parents[2]
for _candidate in [
    _repo_root / "apps" / "api" / ".env",
    _repo_root / ".env",
]:
    if _candidate.exists():
        load_dotenv(_candidate)
        break
else:
    load_dotenv()  # fallback to CWD

_PG_PREFIXES = ("postgresql+psycopg2://", "postgresql://", "postgres://")

_PG_CONNECT_ARGS = {
    "keepalives": 1,
    "keepalives_idle": 10,
    "keepalives_interval": 5,
    "keepalives_count": 5,
    "connect_timeout": 30,
}


def _normalize_database_url(url: str) -> str:
    """Force psycopg v3 driver so SQLAlchemy does not try psycopg2."""
    for prefix in _PG_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def build_database_url() -> str:
    direct = os.getenv("DATABASE_URL")
    if direct:
        return _normalize_database_url(direct)

    user = os.getenv("DATABASE_USER", "app_user")
    password = os.getenv("DATABASE_PW", "app_pw")
    name = os.getenv("DATABASE_NAME", "book_reviews")
    host = os.getenv("DATABASE_HOST", "localhost")
    port = os.getenv("DATABASE_PORT", "5433")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        return dict(_PG_CONNECT_ARGS)
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool.
        return {"check_same_thread": False}
    return {}


def create_db_engine(url: str | None = None, **kwargs) -> Engine:
    """Create an engine for ``url`` (default: the configured database)."""
    url = _normalize_database_url(url) if url else build_database_url()
    return create_engine(url, connect_args=_connect_args(url), **kwargs)


engine = create_db_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
