"""Helpful/like toggles on reviews.

Each review has two voter sets stored as ``ReviewVote`` rows. A toggle is a
single conditional write on the caller's row: delete it if present, otherwise
insert it with ``ON CONFLICT DO NOTHING``. Different users never touch the
same row, so concurrent toggles on one review cannot lose each other's vote.

Retrying a toggle after a transport timeout may flip it back; callers that
retry should read the state first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from bookreviews.db.crud import ReviewCRUD, ReviewVoteCRUD

from .errors import ReviewNotFound

logger = logging.getLogger(__name__)

HELPFUL = "helpful"
LIKE = "like"


@dataclass(frozen=True)
class ToggleResult:
    count: int
    is_set_by_user: bool

    def to_dict(self) -> dict:
        return {"count": self.count, "isSetByUser": self.is_set_by_user}


def _toggle(session: Session, review_id: int, user_id: int, kind: str) -> ToggleResult:
    if ReviewCRUD.get_active(session, review_id) is None:
        raise ReviewNotFound(f"Review {review_id} not found")

    if ReviewVoteCRUD.remove(session, review_id, user_id, kind):
        is_set = False
    else:
        ReviewVoteCRUD.add(session, review_id, user_id, kind)
        is_set = True

    count = ReviewVoteCRUD.count(session, review_id, kind)
    logger.debug(
        "User %s %s %s on review %s (count=%s)",
        user_id,
        "set" if is_set else "cleared",
        kind,
        review_id,
        count,
    )
    return ToggleResult(count=count, is_set_by_user=is_set)


def toggle_helpful(session: Session, review_id: int, user_id: int) -> ToggleResult:
    return _toggle(session, review_id, user_id, HELPFUL)


def toggle_like(session: Session, review_id: int, user_id: int) -> ToggleResult:
    return _toggle(session, review_id, user_id, LIKE)


def vote_counts(session: Session, review_ids: list[int]) -> dict[int, dict[str, int]]:
    return ReviewVoteCRUD.counts_for_reviews(session, review_ids)


def voted_kinds(
    session: Session, review_ids: list[int], user_id: int | None
) -> dict[int, set[str]]:
    if user_id is None:
        return {rid: set() for rid in review_ids}
    return ReviewVoteCRUD.kinds_for_user(session, review_ids, user_id)
