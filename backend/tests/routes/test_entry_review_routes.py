"""Film entries, likes, social reviews and the following feed over HTTP."""

from app.services.privacy_service import PrivacyService
from app.services.social_service import SocialService

ENTRIES = "/api/v1/user-entries"


def _public(db, user):
    PrivacyService(db).update_settings(user.id, rating_visibility="public", review_visibility="public")


class TestUserEntries:
    def test_no_entry_is_204(self, client, auth_headers):
        resp = client.get(ENTRIES, params={"film_id": "film_a"}, headers=auth_headers)
        assert resp.status_code == 204

    def test_upsert_and_read_back(self, client, auth_headers, test_user):
        resp = client.put(
            ENTRIES,
            json={"film_id": "film_a", "rating": 4.46, "short_review": "봄날 같은 영화"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        entry = resp.json()
        assert entry["user_id"] == test_user.id
        assert entry["rating"] == 4.5
        assert entry["like_count"] == 0

        fetched = client.get(ENTRIES, params={"film_id": "film_a"}, headers=auth_headers).json()
        assert fetched["id"] == entry["id"]
        assert fetched["short_review"] == "봄날 같은 영화"

    def test_rating_above_five(self, client, auth_headers):
        resp = client.put(ENTRIES, json={"film_id": "film_a", "rating": 5.5}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_RATING"

    def test_missing_film_id(self, client, auth_headers):
        resp = client.put(ENTRIES, json={"rating": 3}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "FILM_ID_REQUIRED"

    def test_delete_is_always_204(self, client, auth_headers):
        client.put(ENTRIES, json={"film_id": "film_a", "rating": 3}, headers=auth_headers)

        assert client.delete(ENTRIES, params={"film_id": "film_a"}, headers=auth_headers).status_code == 204
        assert client.delete(ENTRIES, params={"film_id": "film_a"}, headers=auth_headers).status_code == 204
        assert client.get(f"{ENTRIES}/list", headers=auth_headers).json() == []

    def test_list(self, client, auth_headers):
        client.put(ENTRIES, json={"film_id": "film_a", "rating": 3}, headers=auth_headers)
        client.put(ENTRIES, json={"film_id": "film_b", "short_review": "좋았다"}, headers=auth_headers)

        films = {item["film_id"] for item in client.get(f"{ENTRIES}/list", headers=auth_headers).json()}
        assert films == {"film_a", "film_b"}


class TestReviews:
    def _review(self, client, headers, film_id="film_a", review="인생 영화"):
        resp = client.put(ENTRIES, json={"film_id": film_id, "rating": 4, "short_review": review}, headers=headers)
        return resp.json()["id"]

    def test_like_toggle(self, client, auth_headers, other_auth_headers):
        entry_id = self._review(client, other_auth_headers)

        liked = client.post(f"/api/v1/reviews/{entry_id}/like", headers=auth_headers)
        assert liked.json() == {"liked": True, "like_count": 1}
        unliked = client.post(f"/api/v1/reviews/{entry_id}/like", headers=auth_headers)
        assert unliked.json() == {"liked": False, "like_count": 0}

    def test_rating_only_entry_cannot_be_liked(self, client, auth_headers, other_auth_headers):
        entry_id = self._review(client, other_auth_headers, review="")

        resp = client.post(f"/api/v1/reviews/{entry_id}/like", headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "REVIEW_REQUIRED"

    def test_like_unknown_entry(self, client, auth_headers):
        resp = client.post("/api/v1/reviews/missing/like", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "ENTRY_NOT_FOUND"

    def test_film_reviews_respect_privacy(self, db, client, other_user, other_auth_headers):
        self._review(client, other_auth_headers)
        assert client.get("/api/v1/reviews/films/film_a").json() == []

        _public(db, other_user)
        items = client.get("/api/v1/reviews/films/film_a").json()

        assert len(items) == 1
        assert items[0]["nickname"] == "critic"
        assert items[0]["short_review"] == "인생 영화"
        assert items[0]["is_liked"] is False

    def test_feed(self, db, client, auth_headers, test_user, other_user, other_auth_headers):
        SocialService(db).toggle_follow(test_user.id, other_user.id)
        _public(db, other_user)
        self._review(client, other_auth_headers)

        feed = client.get("/api/v1/reviews/feed", headers=auth_headers).json()

        assert [item["film_title"] for item in feed["items"]] == ["봄의 정원"]
        assert feed["next_cursor"] is None
