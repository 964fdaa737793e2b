from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bookreviews.db.crud import UserCRUD
from bookreviews.db.models import User
from bookreviews.reviews import user_review_stats

from ..core.deps import Pagination, get_current_user, get_db, get_optional_user
from ..core.review_queries import list_reviews_page
from ..core.serialize import serialize_user
from ..schemas.user import UpdateProfileRequest, UserOut, UserStatsOut

router = APIRouter(prefix="/users", tags=["users"])


def _load_active_user(db: Session, user_id: int) -> User:
    user = UserCRUD.get_active(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return serialize_user(_load_active_user(db, user_id))


@router.put("/{user_id}", response_model=UserOut)
def update_profile(
    user_id: int,
    body: UpdateProfileRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _load_active_user(db, user_id)
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own profile",
        )
    try:
        user = UserCRUD.update(db, user_id, **body.to_columns())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    db.commit()
    return serialize_user(user)


@router.get("/{user_id}/stats", response_model=UserStatsOut)
def get_user_stats(user_id: int, db: Session = Depends(get_db)):
    return user_review_stats(db, user_id).to_dict()


@router.get("/{user_id}/reviews")
def get_user_reviews(
    user_id: int,
    pagination: Pagination = Depends(),
    sortBy: Literal["createdAt", "rating", "helpful", "likes"] = Query("createdAt"),
    sortOrder: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    _load_active_user(db, user_id)
    return list_reviews_page(
        db,
        pagination,
        current_user_id=current_user.id if current_user else None,
        user_id=user_id,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
