"""
Tests for API authentication.

These run against the production app (main.app), so the real
verify_api_key and get_current_user dependencies are exercised.
"""
import os
import uuid
import pytest
from fastapi.testclient import TestClient

# Set test API key before importing app
TEST_API_KEY = "test-api-key-for-testing-purposes-12345678"
os.environ.setdefault("CLINIC_PORTAL_API_KEY", TEST_API_KEY)


@pytest.fixture
def authenticated_client():
    """Create a test client with authenticated routers."""
    from main import app
    return TestClient(app)


@pytest.fixture
def api_key():
    from core.config import API_KEY
    return API_KEY


class TestAuthentication:
    """Test suite for API authentication."""

    def test_missing_api_key_returns_401(self, authenticated_client):
        """Test that requests without API key return 401."""
        response = authenticated_client.get("/api/v1/pipeline/summary")
        assert response.status_code == 401
        assert "Missing API key" in response.json()["detail"]

    def test_invalid_api_key_returns_403(self, authenticated_client):
        """Test that requests with invalid API key return 403."""
        response = authenticated_client.get(
            "/api/v1/pipeline/summary",
            headers={"X-API-Key": "invalid-key"}
        )
        assert response.status_code == 403
        assert "Invalid API key" in response.json()["detail"]

    def test_valid_api_key_without_user_returns_401(self, authenticated_client, api_key):
        """Test that a valid key still needs the acting user header."""
        response = authenticated_client.get(
            "/api/v1/pipeline/summary",
            headers={"X-API-Key": api_key}
        )
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authenticated"}

    def test_unknown_user_returns_401(self, authenticated_client, api_key):
        """Test that an X-User-Id naming no profile is rejected."""
        response = authenticated_client.get(
            "/api/v1/profiles/me",
            headers={"X-API-Key": api_key, "X-User-Id": str(uuid.uuid4())}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Profile not found"

    def test_public_form_lookup_requires_api_key(self, authenticated_client):
        """Test that public form endpoints still need the frontend's API key."""
        response = authenticated_client.get(f"/api/v1/partial-intake-forms/token/{uuid.uuid4()}")
        assert response.status_code == 401

    def test_health_endpoint_no_auth_required(self, authenticated_client):
        """Test that the health/root endpoint doesn't require authentication."""
        response = authenticated_client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "Clinic Portal API"

    def test_marketing_platform_metadata_no_auth_required(self, authenticated_client):
        """Test that the marketing platform registry is public."""
        response = authenticated_client.get("/api/v1/meta/marketing-platforms")
        assert response.status_code == 200
        names = [p["name"] for p in response.json()]
        assert "facebook" in names

    def test_marketing_requires_auth(self, authenticated_client):
        """Test that marketing analytics require the API key."""
        response = authenticated_client.get("/api/v1/marketing/overview")
        assert response.status_code == 401
