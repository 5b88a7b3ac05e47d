"""
Tests for health check endpoints.
"""

from shared.infrastructure.events import QueueSink


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "rest-api"
        assert data["live_order_subscribers"] == 0

    def test_health_reports_open_streams(self, client, registry):
        """Subscriber count reflects registered stream handles."""
        handle = registry.subscribe(QueueSink())
        assert client.get("/api/health").json()["live_order_subscribers"] == 1

        registry.unsubscribe(handle)
        assert client.get("/api/health").json()["live_order_subscribers"] == 0

    def test_response_carries_request_id(self, client):
        """Correlation middleware echoes the incoming request id."""
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_generated_when_missing(self, client):
        response = client.get("/api/health")
        assert response.headers.get("X-Request-ID")
