"""Per-user review statistics for profile pages.

Only active reviews count. Averages use the same half-up rounding as book
ratings.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from bookreviews.db.crud import ReviewCRUD, ReviewVoteCRUD, UserCRUD

from .aggregator import round_rating
from .errors import UserNotFound


@dataclass(frozen=True)
class GenreStat:
    genre: str
    count: int
    average_rating: float

    def to_dict(self) -> dict:
        return {"genre": self.genre, "count": self.count, "averageRating": self.average_rating}


@dataclass(frozen=True)
class UserReviewStats:
    total_reviews: int
    average_rating: float
    total_likes: int
    total_helpful: int
    favorite_genres: list[GenreStat] = field(default_factory=list)
    reading_status_distribution: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalReviews": self.total_reviews,
            "averageRating": self.average_rating,
            "totalLikes": self.total_likes,
            "totalHelpful": self.total_helpful,
            "favoriteGenres": [g.to_dict() for g in self.favorite_genres],
            "readingStatusDistribution": [
                {"status": status, "count": count}
                for status, count in self.reading_status_distribution
            ],
        }


def user_review_stats(session: Session, user_id: int, top_genres: int = 5) -> UserReviewStats:
    """Summarise an active user's reviews.

    Raises:
        UserNotFound: the user is missing or deactivated.
    """
    if UserCRUD.get_active(session, user_id) is None:
        raise UserNotFound(f"User {user_id} not found")

    total, count = ReviewCRUD.user_rating_totals(session, user_id)
    received = ReviewVoteCRUD.received_counts(session, user_id)
    genres = [
        GenreStat(genre=genre, count=n, average_rating=round_rating(rating_sum, n))
        for genre, n, rating_sum in ReviewCRUD.user_genre_totals(session, user_id, limit=top_genres)
    ]
    return UserReviewStats(
        total_reviews=count,
        average_rating=round_rating(total, count),
        total_likes=received["like"],
        total_helpful=received["helpful"],
        favorite_genres=genres,
        reading_status_distribution=ReviewCRUD.user_status_counts(session, user_id),
    )
