"""Tests for UserCRUD."""

import pytest

from bookreviews.db.crud import UserCRUD
from tests.conftest import make_user


class TestUserCRUDCreate:
    def test_create_minimal(self, session):
        user = make_user(session)
        assert user.id is not None
        assert user.email == "alice@example.com"
        assert user.name == "Alice"
        assert user.username == "alice"
        assert user.role == "user"
        assert user.reviews_count == 0

    def test_create_lowercases_email(self, session):
        user = make_user(session, email="Alice@Example.COM")
        assert user.email == "alice@example.com"

    def test_create_admin(self, session):
        user = make_user(session, role="admin")
        assert user.is_admin

    def test_create_unknown_role_raises(self, session):
        with pytest.raises(ValueError, match="role"):
            make_user(session, role="owner")

    def test_create_invalid_email_raises(self, session):
        with pytest.raises(ValueError, match="Invalid email"):
            make_user(session, email="not_an_email")

    def test_create_empty_name_raises(self, session):
        with pytest.raises(ValueError, match="name"):
            make_user(session, name="   ")

    def test_create_bad_username_raises(self, session):
        with pytest.raises(ValueError, match="username"):
            make_user(session, username="no spaces!")

    def test_create_short_username_raises(self, session):
        with pytest.raises(ValueError, match="username"):
            make_user(session, username="ab")

    def test_create_empty_password_hash_raises(self, session):
        with pytest.raises(ValueError, match="password_hash"):
            make_user(session, password_hash="")

    def test_create_duplicate_email_raises(self, session):
        make_user(session, email="dup@example.com", username="user1")
        with pytest.raises(ValueError, match="email"):
            make_user(session, email="dup@example.com", username="user2")

    def test_create_duplicate_username_raises(self, session):
        make_user(session, email="a@example.com", username="same_name")
        with pytest.raises(ValueError, match="username"):
            make_user(session, email="b@example.com", username="same_name")


class TestUserCRUDRead:
    def test_get_by_id_found(self, session):
        user = make_user(session)
        assert UserCRUD.get_by_id(session, user.id).id == user.id

    def test_get_by_id_not_found(self, session):
        assert UserCRUD.get_by_id(session, 99999) is None

    def test_get_active_skips_inactive(self, session):
        user = make_user(session)
        UserCRUD.update(session, user.id, is_active=False)
        assert UserCRUD.get_active(session, user.id) is None

    def test_get_by_email_is_case_insensitive(self, session):
        make_user(session, email="find@example.com")
        assert UserCRUD.get_by_email(session, "FIND@example.com") is not None

    def test_get_by_username(self, session):
        make_user(session, username="reader_1")
        assert UserCRUD.get_by_username(session, "reader_1") is not None
        assert UserCRUD.get_by_username(session, "nobody") is None


class TestUserCRUDUpdate:
    def test_update_name(self, session):
        user = make_user(session)
        UserCRUD.update(session, user.id, name="Alicia")
        assert UserCRUD.get_by_id(session, user.id).name == "Alicia"

    def test_update_missing_user_raises(self, session):
        with pytest.raises(ValueError, match="not found"):
            UserCRUD.update(session, 99999, name="X")

    def test_update_reviews_count_is_rejected(self, session):
        user = make_user(session)
        with pytest.raises(ValueError, match="reviews_count is derived"):
            UserCRUD.update(session, user.id, reviews_count=10)

    def test_update_duplicate_username_raises(self, session):
        make_user(session, email="a@x.com", username="taken")
        other = make_user(session, email="b@x.com", username="free")
        with pytest.raises(ValueError, match="username"):
            UserCRUD.update(session, other.id, username="taken")

    def test_update_profile_fields(self, session):
        user = make_user(session)
        UserCRUD.update(
            session,
            user.id,
            bio="  Reads on the train.  ",
            avatar="https://example.com/a.png",
            favorite_genres=["Fiction", "History", "Fiction"],
        )
        user = UserCRUD.get_by_id(session, user.id)
        assert user.bio == "Reads on the train."
        assert user.avatar == "https://example.com/a.png"
        assert user.favorite_genres == ["Fiction", "History"]

    def test_blank_bio_clears_it(self, session):
        user = make_user(session)
        UserCRUD.update(session, user.id, bio="Hello")
        UserCRUD.update(session, user.id, bio="   ")
        assert UserCRUD.get_by_id(session, user.id).bio is None

    def test_long_bio_raises(self, session):
        user = make_user(session)
        with pytest.raises(ValueError, match="bio must be at most 500"):
            UserCRUD.update(session, user.id, bio="x" * 501)

    def test_too_many_favorite_genres_raises(self, session):
        user = make_user(session)
        with pytest.raises(ValueError, match="at most 10"):
            UserCRUD.update(session, user.id, favorite_genres=[f"g{i}" for i in range(11)])

    def test_blank_favorite_genre_raises(self, session):
        user = make_user(session)
        with pytest.raises(ValueError, match="favorite genre"):
            UserCRUD.update(session, user.id, favorite_genres=["Fiction", " "])


class TestReviewsCounter:
    def test_increment(self, session):
        user = make_user(session)
        assert UserCRUD.increment_reviews_count(session, user.id) is True
        assert UserCRUD.increment_reviews_count(session, user.id) is True
        assert user.reviews_count == 2

    def test_increment_missing_user(self, session):
        assert UserCRUD.increment_reviews_count(session, 99999) is False

    def test_decrement(self, session):
        user = make_user(session)
        UserCRUD.increment_reviews_count(session, user.id)
        assert UserCRUD.decrement_reviews_count(session, user.id) is True
        assert user.reviews_count == 0

    def test_decrement_never_goes_negative(self, session):
        user = make_user(session)
        assert UserCRUD.decrement_reviews_count(session, user.id) is False
        assert user.reviews_count == 0
