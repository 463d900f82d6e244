import pytest


@pytest.mark.integration
class TestAppEndpoints:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["status"] == "online"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"] == {"status": "healthy", "database": "connected"}

    def test_health_reports_database_failure(self, client, db):
        db.denied_paths.add("categories")

        data = client.get("/health").json()

        assert data["success"] is False
        assert data["error"]["category"] == "Internal Server Error"

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json()["success"] is False
