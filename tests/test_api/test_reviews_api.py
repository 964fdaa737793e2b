from sqlalchemy.exc import OperationalError

from bookreviews.db.crud import BookCRUD, ReviewCRUD, UserCRUD
from tests.test_api.conftest import auth_header


def _post_review(client, user_id, book_id, rating=4, **extra):
    body = {
        "bookId": book_id,
        "rating": rating,
        "title": "Worth it",
        "content": "A long and thoughtful review.",
        **extra,
    }
    return client.post("/reviews", json=body, headers=auth_header(user_id))


def _book(client, book_id):
    return client.get(f"/books/{book_id}").json()


class TestReviewFlow:
    def test_rating_summary_follows_review_writes(self, client, seeded):
        book_id = seeded["book"]

        first = _post_review(client, seeded["alice"], book_id, rating=4)
        assert first.status_code == 201
        review_id = first.json()["id"]
        assert _book(client, book_id)["averageRating"] == 4.0

        assert _post_review(client, seeded["bob"], book_id, rating=2).status_code == 201
        book = _book(client, book_id)
        assert (book["averageRating"], book["totalRatings"]) == (3.0, 2)

        resp = client.patch(
            f"/reviews/{review_id}", json={"rating": 5}, headers=auth_header(seeded["alice"])
        )
        assert resp.status_code == 200
        assert resp.json()["rating"] == 5
        assert _book(client, book_id)["averageRating"] == 3.5

        resp = client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["alice"]))
        assert resp.status_code == 204
        book = _book(client, book_id)
        assert (book["averageRating"], book["totalRatings"]) == (2.0, 1)
        assert client.get(f"/users/{seeded['alice']}").json()["reviewsCount"] == 0
        assert client.get(f"/reviews/{review_id}").status_code == 404

    def test_created_review_shape(self, client, seeded):
        resp = _post_review(client, seeded["alice"], seeded["book"], tags=["classic"])
        data = resp.json()
        assert data["user"]["username"] == "alice"
        assert data["bookId"] == str(seeded["book"])
        assert data["readingStatus"] == "Read"
        assert data["readDate"] is not None
        assert data["tags"] == ["classic"]
        assert data["helpful"] == {"count": 0, "isSetByMe": False}
        assert data["likes"] == {"count": 0, "isSetByMe": False}

    def test_requires_authentication(self, client, seeded):
        resp = client.post(
            "/reviews",
            json={"bookId": seeded["book"], "rating": 4, "title": "t", "content": "c"},
        )
        assert resp.status_code == 401


class TestReviewErrors:
    def test_failed_rating_write_rolls_back_review(
        self, client, seeded, session_factory, monkeypatch
    ):
        def fail(*args, **kwargs):
            raise OperationalError("UPDATE books", {}, Exception("disk I/O error"))

        monkeypatch.setattr(BookCRUD, "set_rating_summary", fail)

        resp = _post_review(client, seeded["alice"], seeded["book"])
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"

        with session_factory() as session:
            assert ReviewCRUD.get_by_user_and_book(session, seeded["alice"], seeded["book"]) is None
            assert UserCRUD.get_by_id(session, seeded["alice"]).reviews_count == 0
            assert BookCRUD.get_by_id(session, seeded["book"]).total_ratings == 0

    def test_duplicate_is_conflict(self, client, seeded):
        _post_review(client, seeded["alice"], seeded["book"])
        resp = _post_review(client, seeded["alice"], seeded["book"], rating=1)
        assert resp.status_code == 409
        assert resp.json()["code"] == "duplicate_review"
        assert _book(client, seeded["book"])["averageRating"] == 4.0

    def test_duplicate_after_delete_is_conflict(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["alice"]))
        resp = _post_review(client, seeded["alice"], seeded["book"])
        assert resp.status_code == 409

    def test_unknown_book_is_not_found(self, client, seeded):
        resp = _post_review(client, seeded["alice"], 99999)
        assert resp.status_code == 404
        assert resp.json()["code"] == "book_not_found"

    def test_rating_out_of_range_is_rejected(self, client, seeded):
        resp = _post_review(client, seeded["alice"], seeded["book"], rating=6)
        assert resp.status_code == 422

    def test_derived_counts_are_not_accepted(self, client, seeded):
        resp = _post_review(client, seeded["alice"], seeded["book"], helpful=[1, 2])
        assert resp.status_code == 422

    def test_blank_tag_is_validation_failed(self, client, seeded):
        resp = _post_review(client, seeded["alice"], seeded["book"], tags=["  "])
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_failed"

    def test_other_user_cannot_edit(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        resp = client.patch(
            f"/reviews/{review_id}", json={"rating": 1}, headers=auth_header(seeded["bob"])
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == "forbidden"
        assert client.get(f"/reviews/{review_id}").json()["rating"] == 4

    def test_other_user_cannot_delete(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        resp = client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["bob"]))
        assert resp.status_code == 403

    def test_admin_can_delete(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        resp = client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["admin"]))
        assert resp.status_code == 204
        assert _book(client, seeded["book"])["totalRatings"] == 0

    def test_second_delete_is_not_found(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["alice"]))
        resp = client.delete(f"/reviews/{review_id}", headers=auth_header(seeded["alice"]))
        assert resp.status_code == 404
        assert resp.json()["code"] == "review_not_found"


class TestToggles:
    def test_helpful_toggle_round_trip(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        headers = auth_header(seeded["bob"])

        resp = client.post(f"/reviews/{review_id}/helpful", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"count": 1, "isSetByUser": True}

        seen = client.get(f"/reviews/{review_id}", headers=headers).json()
        assert seen["helpful"] == {"count": 1, "isSetByMe": True}
        anonymous = client.get(f"/reviews/{review_id}").json()
        assert anonymous["helpful"] == {"count": 1, "isSetByMe": False}

        resp = client.post(f"/reviews/{review_id}/helpful", headers=headers)
        assert resp.json() == {"count": 0, "isSetByUser": False}

    def test_like_is_independent(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        client.post(f"/reviews/{review_id}/helpful", headers=auth_header(seeded["bob"]))
        resp = client.post(f"/reviews/{review_id}/like", headers=auth_header(seeded["alice"]))
        assert resp.json() == {"count": 1, "isSetByUser": True}

    def test_toggle_missing_review(self, client, seeded):
        resp = client.post("/reviews/99999/like", headers=auth_header(seeded["bob"]))
        assert resp.status_code == 404
        assert resp.json()["code"] == "review_not_found"

    def test_toggle_requires_authentication(self, client, seeded):
        review_id = _post_review(client, seeded["alice"], seeded["book"]).json()["id"]
        assert client.post(f"/reviews/{review_id}/like").status_code == 401


class TestListing:
    def test_book_reviews_page(self, client, seeded):
        _post_review(client, seeded["alice"], seeded["book"], rating=2)
        _post_review(client, seeded["bob"], seeded["book"], rating=5)

        resp = client.get(
            f"/books/{seeded['book']}/reviews", params={"sortBy": "rating", "limit": 1}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [item["rating"] for item in data["items"]] == [5]
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 2,
            "totalItems": 2,
            "hasNextPage": True,
            "hasPrevPage": False,
            "limit": 1,
        }

    def test_filter_by_rating(self, client, seeded):
        _post_review(client, seeded["alice"], seeded["book"], rating=2)
        _post_review(client, seeded["bob"], seeded["book"], rating=5)
        data = client.get("/reviews", params={"bookId": seeded["book"], "rating": 2}).json()
        assert data["pagination"]["totalItems"] == 1
        assert data["items"][0]["user"]["username"] == "alice"

    def test_user_reviews(self, client, seeded):
        _post_review(client, seeded["bob"], seeded["book"])
        data = client.get(f"/users/{seeded['bob']}/reviews").json()
        assert data["pagination"]["totalItems"] == 1

    def test_empty_listing(self, client, seeded):
        data = client.get(f"/books/{seeded['book']}/reviews").json()
        assert data["items"] == []
        assert data["pagination"]["totalPages"] == 0
