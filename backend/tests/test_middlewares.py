"""
Tests for the API middlewares and request infrastructure.
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rest_api.core.middlewares import (
    SecurityHeadersMiddleware,
    ContentTypeValidationMiddleware,
    register_middlewares,
)
from shared.infrastructure.correlation import CorrelationIdFilter, request_id_var
from shared.infrastructure.db import safe_commit


def build_app(*middlewares) -> FastAPI:
    app = FastAPI()
    for middleware in middlewares:
        app.add_middleware(middleware)

    @app.get("/test")
    def get_endpoint():
        return {"message": "ok"}

    @app.post("/test")
    def post_endpoint():
        return {"message": "ok"}

    return app


# =============================================================================
# SecurityHeadersMiddleware Tests
# =============================================================================

class TestSecurityHeadersMiddleware:
    """Tests for security headers middleware."""

    def test_adds_security_headers(self):
        """Should add nosniff, frame and referrer headers."""
        response = TestClient(build_app(SecurityHeadersMiddleware)).get("/test")

        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert response.headers.get("X-Frame-Options") == "DENY"
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"

    def test_adds_hsts_in_production(self):
        """Should add HSTS header only in production."""
        with patch("shared.config.settings.settings") as mock_settings:
            mock_settings.environment = "production"
            response = TestClient(build_app(SecurityHeadersMiddleware)).get("/test")

        assert "max-age=31536000" in response.headers.get("Strict-Transport-Security", "")

    def test_no_hsts_outside_production(self):
        """Should not add HSTS header in development or tests."""
        response = TestClient(build_app(SecurityHeadersMiddleware)).get("/test")

        assert "Strict-Transport-Security" not in response.headers


# =============================================================================
# ContentTypeValidationMiddleware Tests
# =============================================================================

class TestContentTypeValidationMiddleware:
    """Tests for content-type validation middleware."""

    @pytest.fixture
    def client(self):
        return TestClient(build_app(ContentTypeValidationMiddleware))

    def test_allows_json_content_type(self, client):
        response = client.post("/test", json={"key": "value"})
        assert response.status_code == 200

    def test_allows_body_less_post(self, client):
        """Action endpoints like /cancel are posted without a body."""
        response = client.post("/test")
        assert response.status_code == 200

    @pytest.mark.parametrize("content_type", ["text/plain", "application/x-www-form-urlencoded"])
    def test_rejects_other_content_types(self, client, content_type):
        response = client.post("/test", content="some data", headers={"Content-Type": content_type})

        assert response.status_code == 415
        assert "Unsupported Media Type" in response.json()["detail"]

    def test_allows_get_without_content_type(self, client):
        assert client.get("/test").status_code == 200


# =============================================================================
# CorrelationIdFilter Tests
# =============================================================================

class TestCorrelationIdFilter:
    """Tests for correlation ID logging filter."""

    def test_adds_request_id_to_log_record(self):
        token = request_id_var.set("test-request-123")
        try:
            record = MagicMock()
            assert CorrelationIdFilter().filter(record) is True
            assert record.request_id == "test-request-123"
        finally:
            request_id_var.reset(token)

    def test_uses_dash_when_no_request_id(self):
        token = request_id_var.set("")
        try:
            record = MagicMock()
            CorrelationIdFilter().filter(record)
            assert record.request_id == "-"
        finally:
            request_id_var.reset(token)


# =============================================================================
# safe_commit Tests
# =============================================================================

class TestSafeCommit:
    """Tests for safe_commit utility."""

    def test_commits_successfully(self):
        mock_db = MagicMock()

        safe_commit(mock_db)

        mock_db.commit.assert_called_once()
        mock_db.rollback.assert_not_called()

    def test_rollbacks_and_reraises(self):
        """Should roll back and re-raise the original exception."""
        mock_db = MagicMock()

        class CustomDBError(Exception):
            pass

        mock_db.commit.side_effect = CustomDBError("Custom error")

        with pytest.raises(CustomDBError):
            safe_commit(mock_db)
        mock_db.rollback.assert_called_once()


# =============================================================================
# register_middlewares Tests
# =============================================================================

class TestRegisterMiddlewares:
    def test_registers_all_middlewares(self):
        app = FastAPI()

        register_middlewares(app)

        middleware_classes = [m.cls for m in app.user_middleware]
        assert SecurityHeadersMiddleware in middleware_classes
        assert ContentTypeValidationMiddleware in middleware_classes
