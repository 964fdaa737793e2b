"""Review bookkeeping: rating aggregation, vote toggles and review lifecycle.

Example:
    >>> from bookreviews.reviews import create_review, toggle_helpful
    >>> review = create_review(session, user.id, book.id, rating=4, title="Good", content="...")
    >>> toggle_helpful(session, review.id, other_user.id)
    ToggleResult(count=1, is_set_by_user=True)
"""

from .aggregator import RatingSummary, recompute_rating, round_rating
from .errors import (
    AggregationFailed,
    BookNotFound,
    DuplicateReview,
    Forbidden,
    NotFound,
    ReviewNotFound,
    ReviewsError,
    UserNotFound,
    ValidationFailed,
)
from .ledger import ToggleResult, toggle_helpful, toggle_like, vote_counts, voted_kinds
from .lifecycle import create_review, delete_review, update_review
from .stats import GenreStat, UserReviewStats, user_review_stats
