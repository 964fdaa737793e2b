import pytest

from bookreviews.db.crud import ReviewCRUD, UserCRUD
from bookreviews.reviews import (
    GenreStat,
    UserNotFound,
    toggle_helpful,
    toggle_like,
    user_review_stats,
)
from tests.conftest import make_book, make_review, make_user


@pytest.fixture
def author(session):
    return make_user(session)


@pytest.fixture
def fans(session):
    return [
        make_user(session, email=f"fan{i}@example.com", username=f"fan{i}") for i in range(2)
    ]


class TestUserReviewStats:
    def test_no_reviews(self, session, author):
        stats = user_review_stats(session, author.id)
        assert stats.total_reviews == 0
        assert stats.average_rating == 0.0
        assert stats.favorite_genres == []
        assert stats.reading_status_distribution == []

    def test_totals_and_votes(self, session, author, fans):
        first = make_review(session, author, make_book(session, genre="Fiction"), rating=4)
        second = make_review(
            session, author, make_book(session, title="Emma", genre="Fiction"), rating=3,
            reading_status="DNF",
        )
        for fan in fans:
            toggle_helpful(session, first.id, fan.id)
        toggle_like(session, second.id, fans[0].id)

        stats = user_review_stats(session, author.id)

        assert stats.total_reviews == 2
        assert stats.average_rating == 3.5
        assert stats.total_helpful == 2
        assert stats.total_likes == 1
        assert stats.favorite_genres == [GenreStat(genre="Fiction", count=2, average_rating=3.5)]
        assert stats.reading_status_distribution == [("DNF", 1), ("Read", 1)]

    def test_average_rounds_half_up(self, session, author):
        for title, rating in (("A", 4), ("B", 3), ("C", 3), ("D", 3)):
            make_review(session, author, make_book(session, title=title), rating=rating)
        assert user_review_stats(session, author.id).average_rating == 3.3

    def test_deleted_reviews_and_their_votes_are_ignored(self, session, author, fans):
        review = make_review(session, author, make_book(session, genre="Fiction"))
        toggle_helpful(session, review.id, fans[0].id)
        ReviewCRUD.deactivate(session, review.id)

        stats = user_review_stats(session, author.id)

        assert stats.total_reviews == 0
        assert stats.total_helpful == 0
        assert stats.favorite_genres == []

    def test_top_genres_are_capped(self, session, author):
        for i in range(7):
            make_review(session, author, make_book(session, title=f"B{i}", genre=f"G{i}"))
        assert len(user_review_stats(session, author.id).favorite_genres) == 5
        assert len(user_review_stats(session, author.id, top_genres=2).favorite_genres) == 2

    def test_to_dict(self, session, author):
        make_review(session, author, make_book(session, genre="Fiction"), rating=5)
        assert user_review_stats(session, author.id).to_dict() == {
            "totalReviews": 1,
            "averageRating": 5.0,
            "totalLikes": 0,
            "totalHelpful": 0,
            "favoriteGenres": [{"genre": "Fiction", "count": 1, "averageRating": 5.0}],
            "readingStatusDistribution": [{"status": "Read", "count": 1}],
        }

    def test_missing_user(self, session):
        with pytest.raises(UserNotFound):
            user_review_stats(session, 99999)

    def test_inactive_user(self, session, author):
        UserCRUD.update(session, author.id, is_active=False)
        with pytest.raises(UserNotFound):
            user_review_stats(session, author.id)
