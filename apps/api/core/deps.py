from __future__ import annotations

import math
from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookreviews.db.crud import UserCRUD
from bookreviews.db.models import User
from bookreviews.db.session import SessionLocal
from sqlalchemy.orm import Session

from .auth import decode_token
from .config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with SessionLocal() as session:
        yield session


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user_id = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = UserCRUD.get_active(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    if credentials is None:
        return None
    try:
        user_id = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        return None
    return UserCRUD.get_active(db, user_id)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


class Pagination:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int | None = Query(None, ge=1),
    ):
        self.page = page
        self.limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def envelope(self, items: list, total: int) -> dict:
        total_pages = math.ceil(total / self.limit)
        return {
            "items": items,
            "pagination": {
                "currentPage": self.page,
                "totalPages": total_pages,
                "totalItems": total,
                "hasNextPage": self.page < total_pages,
                "hasPrevPage": self.page > 1,
                "limit": self.limit,
            },
        }
