"""The signed-in user's account: nickname, profile, terms and deletion."""

ACCOUNT = "/api/v1/account"


def test_me(client, auth_headers, test_user):
    me = client.get(f"{ACCOUNT}/me", headers=auth_headers).json()

    assert me["id"] == test_user.id
    assert me["nickname"] == "viewer"
    assert me["needs_onboarding"] is True


def test_nickname_check_and_update(client, auth_headers, other_user):
    check = client.get(f"{ACCOUNT}/nickname/check", params={"nickname": "critic"}, headers=auth_headers)
    assert check.json()["available"] is False

    taken = client.put(f"{ACCOUNT}/nickname", json={"nickname": "critic"}, headers=auth_headers)
    assert taken.status_code == 409
    assert taken.json()["code"] == "NICKNAME_TAKEN"

    updated = client.put(f"{ACCOUNT}/nickname", json={"nickname": "영화광"}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["nickname"] == "영화광"


def test_profile_update(client, auth_headers):
    resp = client.patch(
        f"{ACCOUNT}/profile", json={"bio": "영화제 단골", "letterboxd_id": "viewer_lb"}, headers=auth_headers
    )

    assert resp.status_code == 200
    assert resp.json()["bio"] == "영화제 단골"
    assert resp.json()["letterboxd_id"] == "viewer_lb"


def test_profile_validation(client, auth_headers):
    resp = client.patch(f"{ACCOUNT}/profile", json={"bio": "x" * 161}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "BIO_TOO_LONG"


def test_terms_finish_onboarding(client, auth_headers):
    resp = client.post(f"{ACCOUNT}/terms", headers=auth_headers)

    assert resp.json()["needs_onboarding"] is False
    assert resp.json()["terms_accepted_at"] is not None


def test_delete_account(client, auth_headers, test_user, test_password):
    client.put("/api/v1/user-entries", json={"film_id": "film_a", "rating": 4}, headers=auth_headers)

    assert client.delete(ACCOUNT, headers=auth_headers).status_code == 204

    # the token no longer maps to a user
    assert client.get(f"{ACCOUNT}/me", headers=auth_headers).status_code == 401
    login = client.post(
        "/api/v1/auth/login", data={"username": test_user.email, "password": test_password}
    )
    assert login.status_code == 401
