import pytest

API = "/api/v1/users"


@pytest.mark.integration
class TestUserEndpoints:
    """Integration tests for /users."""

    def test_register(self, client, auth_headers, db):
        response = client.post(
            f"{API}/register",
            json={"username": "newbie", "email": "newbie@example.com"},
            headers=auth_headers("new-uid"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["data"] == {"uid": "new-uid", "username": "newbie"}
        assert db.data("users/new-uid")["email"] == "newbie@example.com"

    def test_register_bad_email(self, client, auth_headers):
        response = client.post(
            f"{API}/register", json={"username": "newbie", "email": "nope"}, headers=auth_headers("new-uid")
        )

        assert response.status_code == 422
        assert response.json()["error"]["category"] == "Validation"

    def test_register_taken_username(self, client, auth_headers, users):
        response = client.post(
            f"{API}/register", json={"username": "alice", "email": "x@example.com"}, headers=auth_headers("new-uid")
        )

        assert response.status_code == 409
        assert response.json()["error"]["category"] == "Resource Conflict"

    def test_me(self, client, auth_headers, users):
        response = client.get(f"{API}/me", headers=auth_headers("member-uid"))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "member-uid@example.com"

    def test_username_available_without_token(self, client, users):
        taken = client.get(f"{API}/username-available", params={"username": "alice"})
        free = client.get(f"{API}/username-available", params={"username": "zelda"})

        assert taken.status_code == 200
        assert taken.json()["data"] == {"username": "alice", "available": False}
        assert free.json()["data"]["available"] is True

    def test_update_username(self, client, auth_headers, users):
        headers = auth_headers("member-uid")
        response = client.put(f"{API}/me/username", json={"username": "caroline"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "caroline"

        profile = client.get(f"{API}/member-uid", headers=auth_headers("owner-uid"))
        assert profile.json()["data"]["username"] == "caroline"

    def test_update_username_rejects_symbols(self, client, auth_headers, users):
        response = client.put(f"{API}/me/username", json={"username": "car ol!"}, headers=auth_headers("member-uid"))
        assert response.status_code == 422

    def test_save_fcm_token(self, client, auth_headers, users, db):
        response = client.put(f"{API}/me/fcm-token", json={"token": "device-9"}, headers=auth_headers("member-uid"))

        assert response.status_code == 200
        assert db.data("fcmTokens/member-uid")["token"] == "device-9"

    def test_get_missing_profile(self, client, auth_headers, users):
        response = client.get(f"{API}/ghost", headers=auth_headers("member-uid"))
        assert response.status_code == 404

    def test_delete_account(self, client, auth_headers, household, db, deleted_auth_users):
        response = client.delete(f"{API}/me", headers=auth_headers(household.member))

        assert response.status_code == 200
        assert household.member not in db.data("households/house-1")["members"]
        assert db.data(f"users/{household.member}") is None
        assert deleted_auth_users == [household.member]
