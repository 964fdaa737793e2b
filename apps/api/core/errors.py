"""Translate review bookkeeping errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from bookreviews.reviews.errors import (
    AggregationFailed,
    DuplicateReview,
    Forbidden,
    NotFound,
    ReviewsError,
    ValidationFailed,
)

logger = logging.getLogger("uvicorn.error")

_STATUS_BY_ERROR: list[tuple[type[ReviewsError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (DuplicateReview, status.HTTP_409_CONFLICT),
    (ValidationFailed, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


def error_response(exc: ReviewsError) -> tuple[int, dict]:
    """Return ``(status_code, body)`` for a domain error.

    ``AggregationFailed`` and anything unmapped become a generic 500 so
    internal bookkeeping failures never get their own client-facing code.
    """
    if not isinstance(exc, AggregationFailed):
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                return status_code, {"detail": str(exc), "code": exc.code}
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"detail": "Internal server error", "code": "internal_error"},
    )


async def _handle_reviews_error(request: Request, exc: ReviewsError) -> JSONResponse:
    status_code, body = error_response(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReviewsError, _handle_reviews_error)
