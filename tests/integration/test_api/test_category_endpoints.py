import pytest

API = "/api/v1/categories"


@pytest.fixture
def categories(db):
    db.seed("categories/dairy", {"name": "Dairy", "order": 1, "createdAt": 1})
    db.seed("categories/produce", {"name": "Produce", "order": 0, "createdAt": 1})


@pytest.mark.integration
class TestCategoryEndpoints:
    """Integration tests for /categories."""

    def test_list_in_order(self, client, auth_headers, users, categories):
        response = client.get(API, headers=auth_headers("member-uid"))

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Produce", "Dairy"]

    def test_admin_creates_category(self, client, auth_headers, users, categories, db):
        response = client.post(API, json={"name": " Frozen ", "order": 5}, headers=auth_headers("admin-uid"))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Frozen"
        assert db.data(f"categories/{data['id']}")["order"] == 5

    def test_non_admin_cannot_create(self, client, auth_headers, users):
        response = client.post(API, json={"name": "Frozen"}, headers=auth_headers("owner-uid"))

        assert response.status_code == 403
        assert response.json()["error"]["category"] == "Authorization"

    def test_duplicate_name(self, client, auth_headers, users, categories):
        response = client.post(API, json={"name": "dairy"}, headers=auth_headers("admin-uid"))

        assert response.status_code == 409
        assert response.json()["error"]["category"] == "Resource Conflict"

    def test_update_category(self, client, auth_headers, users, categories, db):
        response = client.put(f"{API}/dairy", json={"name": "Milk & Cheese", "order": 3}, headers=auth_headers("admin-uid"))

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Milk & Cheese"
        assert db.data("categories/dairy") == {"name": "Milk & Cheese", "order": 3, "createdAt": 1}

    def test_rename_onto_existing(self, client, auth_headers, users, categories):
        response = client.put(f"{API}/dairy", json={"name": "Produce", "order": 3}, headers=auth_headers("admin-uid"))
        assert response.status_code == 409

    def test_delete_category(self, client, auth_headers, users, categories, db):
        response = client.delete(f"{API}/produce", headers=auth_headers("admin-uid"))

        assert response.status_code == 200
        assert db.data("categories/produce") is None

        missing = client.delete(f"{API}/produce", headers=auth_headers("admin-uid"))
        assert missing.status_code == 404
