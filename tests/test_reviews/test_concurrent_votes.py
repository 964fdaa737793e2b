"""Toggles from many users at once against a file-backed SQLite database."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from bookreviews.db.base import Base
from bookreviews.db.crud import ReviewVoteCRUD
from bookreviews.reviews import toggle_helpful
from tests.conftest import make_book, make_review, make_user

VOTERS = 8


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'votes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # pysqlite defers BEGIN; take the write lock up front so writers queue
    # on the busy timeout instead of failing on lock upgrade.
    @event.listens_for(engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def setup(session_factory):
    with session_factory() as session:
        author = make_user(session)
        review = make_review(session, author, make_book(session))
        voters = [
            make_user(session, email=f"v{i}@example.com", username=f"voter{i}")
            for i in range(VOTERS)
        ]
        ids = {"review": review.id, "voters": [v.id for v in voters]}
        session.commit()
    return ids


def _toggle_all(session_factory, review_id, user_ids):
    barrier = threading.Barrier(len(user_ids))

    def vote(user_id):
        barrier.wait()
        with session_factory() as session:
            result = toggle_helpful(session, review_id, user_id)
            session.commit()
        return result

    with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
        return list(pool.map(vote, user_ids))


def test_parallel_votes_are_all_counted(session_factory, setup):
    results = _toggle_all(session_factory, setup["review"], setup["voters"])

    assert all(r.is_set_by_user for r in results)
    assert sorted(r.count for r in results) == list(range(1, VOTERS + 1))
    with session_factory() as session:
        assert ReviewVoteCRUD.count(session, setup["review"], "helpful") == VOTERS


def test_parallel_clears_leave_other_votes(session_factory, setup):
    _toggle_all(session_factory, setup["review"], setup["voters"])

    leaving = setup["voters"][: VOTERS // 2]
    results = _toggle_all(session_factory, setup["review"], leaving)

    assert not any(r.is_set_by_user for r in results)
    with session_factory() as session:
        assert ReviewVoteCRUD.count(session, setup["review"], "helpful") == VOTERS - len(leaving)
        staying = setup["voters"][-1]
        assert ReviewVoteCRUD.kinds_for_user(session, [setup["review"]], staying) == {
            setup["review"]: {"helpful"}
        }
