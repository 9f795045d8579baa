"""Favorite screening toggles and priorities over HTTP."""

URL = "/api/v1/favorite-screenings"


def test_favorite_and_unfavorite(client, auth_headers):
    resp = client.put(URL, json={"screening_id": "scr_a1", "priority": 1}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["screening_id"] == "scr_a1"
    assert resp.json()["priority"] == 1

    listed = client.get(URL, params={"screening_ids": "scr_a1,scr_b1"}, headers=auth_headers)
    assert listed.json() == {"items": [{"screening_id": "scr_a1", "priority": 1, "sort_order": None}]}

    removed = client.put(URL, json={"screening_id": "scr_a1", "favorite": False}, headers=auth_headers)
    assert removed.status_code == 204
    assert client.get(f"{URL}/mine", headers=auth_headers).json() == {"items": []}


def test_priority_out_of_range(client, auth_headers):
    resp = client.put(URL, json={"screening_id": "scr_a1", "priority": 3}, headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


def test_unknown_fields_are_rejected(client, auth_headers):
    resp = client.put(URL, json={"screening_id": "scr_a1", "color": "red"}, headers=auth_headers)
    assert resp.status_code == 422


def test_missing_screening_id(client, auth_headers):
    resp = client.put(URL, json={"favorite": True}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "SCREENING_ID_REQUIRED"


def test_cycle_priority(client, auth_headers):
    client.put(URL, json={"screening_id": "scr_b1"}, headers=auth_headers)

    first = client.post(f"{URL}/scr_b1/priority", headers=auth_headers)
    second = client.post(f"{URL}/scr_b1/priority", headers=auth_headers)

    assert first.status_code == 200
    assert [first.json()["priority"], second.json()["priority"]] == [1, 2]


def test_cycle_priority_without_favorite(client, auth_headers):
    resp = client.post(f"{URL}/scr_b1/priority", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "FAVORITE_NOT_FOUND"


def test_favorites_are_per_user(client, auth_headers, other_auth_headers):
    client.put(URL, json={"screening_id": "scr_a1"}, headers=auth_headers)
    assert client.get(f"{URL}/mine", headers=other_auth_headers).json() == {"items": []}


def test_requires_authentication(client):
    assert client.put(URL, json={"screening_id": "scr_a1"}).status_code == 401
