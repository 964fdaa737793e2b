"""Book Reviews FastAPI application.

Run with:
    uvicorn apps.api.main:app --reload

Production-friendly entrypoint (uses PORT env fallback):
    python -m apps.api.main
"""

from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.errors import register_error_handlers
from .routers import auth, books, reviews, users

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="Book Reviews API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(books.router)
app.include_router(reviews.router)
app.include_router(users.router)


@app.on_event("startup")
async def startup_event():
    logging.getLogger("bookreviews").setLevel(settings.LOG_LEVEL)
    logger.info("CORS origins: %s", settings.CORS_ORIGINS)


@app.get("/")
def health_check():
    return {"status": "ok", "service": "Book Reviews API"}


def _get_cli_arg(argv: list[str], flag: str) -> str | None:
    for i, arg in enumerate(argv):
        if arg == flag and i + 1 < len(argv):
            return argv[i + 1]
        if arg.startswith(f"{flag}="):
            return arg.split("=", 1)[1]
    return None


def _resolve_port(argv: list[str]) -> int:
    cli_port = _get_cli_arg(argv, "--port")
    if cli_port is not None:
        return int(cli_port)

    env_port = os.getenv("PORT")
    if env_port:
        return int(env_port)

    return 8000


def _resolve_host(argv: list[str]) -> str:
    cli_host = _get_cli_arg(argv, "--host")
    if cli_host is not None:
        return cli_host
    return os.getenv("HOST", "0.0.0.0")


if __name__ == "__main__":
    import uvicorn

    args = sys.argv[1:]
    uvicorn.run(
        "apps.api.main:app",
        host=_resolve_host(args),
        port=_resolve_port(args),
        reload="--reload" in args,
        log_level=settings.LOG_LEVEL.lower(),
    )
