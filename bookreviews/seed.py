import logging
import os

import bcrypt
from sqlalchemy import select

from bookreviews.db.crud import BookCRUD, UserCRUD
from bookreviews.db.models import Book, User
from bookreviews.db.session import SessionLocal

logger = logging.getLogger(__name__)


def seed(session_factory=SessionLocal):
    """Create the admin account and a demo book if they do not exist yet."""
    password = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123")
    with session_factory() as db:
        admin = db.scalar(select(User).where(User.email == "admin@example.com"))
        if admin is None:
            admin = UserCRUD.create(
                db,
                email="admin@example.com",
                name="Admin",
                username="admin",
                password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode(),
                role="admin",
            )
            logger.info("Created admin user %s", admin.id)

        if db.scalar(select(Book).where(Book.title == "Nineteen Eighty-Four")) is None:
            book = BookCRUD.create(
                db,
                title="Nineteen Eighty-Four",
                author="George Orwell",
                description="A dystopian novel about surveillance and totalitarian rule.",
                genre="Fiction",
                publication_year=1949,
                created_by=admin.id,
            )
            logger.info("Created demo book %s", book.id)
        db.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
