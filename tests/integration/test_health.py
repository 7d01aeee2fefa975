"""
Integration tests for health endpoints.
"""
from fastapi.testclient import TestClient


class TestHealthAPI:
    def test_health(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_ready_reports_sessions(self, test_client: TestClient):
        test_client.post("/v1/reels/sessions", json={})

        data = test_client.get("/health/ready").json()

        assert data["status"] == "ready"
        assert data["backend"] == "memory"
        assert data["circuit_breaker"] == {"name": "backend_reads", "state": "closed"}
        assert data["sessions"] == 1
