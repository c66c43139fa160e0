"""Integration tests for health check endpoints."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client: TestClient) -> None:
        """Test that /health endpoint returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_service_info(self, client: TestClient) -> None:
        """Test that /health reports status, service name and version."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["service"] == "iheadshot-backend"
        assert data["version"] == "0.1.0"
        assert data["timestamp"] is not None


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    @patch("src.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_readiness_returns_200_when_database_is_up(self, mock_check: AsyncMock, client: TestClient) -> None:
        """Test readiness when the database answers."""
        mock_check.return_value = {"healthy": True}

        response = client.get("/health/ready")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["checks"][0]["name"] == "database"
        assert data["checks"][0]["healthy"] is True

    @patch("src.api.routes.health.check_database_connection", new_callable=AsyncMock)
    def test_readiness_returns_503_when_database_is_down(self, mock_check: AsyncMock, client: TestClient) -> None:
        """Test readiness when the database is unreachable."""
        mock_check.return_value = {"healthy": False, "error": "connection refused"}

        response = client.get("/health/ready")
        data = response.json()

        assert response.status_code == 503
        assert data["status"] == "unhealthy"
        assert data["checks"][0]["error"] == "connection refused"
