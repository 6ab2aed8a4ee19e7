"""
Portfolio Health and Edge Case Tests
Health endpoints, docs, CORS and configuration parsing
"""

import pytest

from portfolio.config import Settings


class TestRootEndpoint:
    """Tests for GET / endpoint"""

    def test_root_returns_ok(self, client):
        """Should return healthy status"""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert data["service"] == "Portfolio API"


class TestHealthEndpoint:
    """Tests for GET /health endpoint"""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert data["supabase_configured"] is False

    def test_health_includes_version(self, client):
        from portfolio import __version__
        assert client.get("/health").json()["version"] == __version__


class TestOpenAPIEndpoints:
    """Tests for API documentation endpoints"""

    def test_docs_available(self, client):
        assert client.get("/docs").status_code == 200

    def test_openapi_lists_routes(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/api/auth/access" in paths
        assert "/api/hours/entries" in paths
        assert "/api/stats/annual" in paths


class TestCORSHeaders:
    """Tests for CORS functionality"""

    def test_preflight_allowed_origin(self, client):
        response = client.options(
            "/api/blog/posts",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET"
            }
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_required_role_header_exposed(self, client):
        response = client.get("/", headers={"Origin": "http://localhost:5173"})
        assert "X-Required-Role" in response.headers.get("access-control-expose-headers", "")


class TestUnknownRoutes:

    def test_404(self, client):
        assert client.get("/api/does-not-exist").status_code == 404

    def test_method_not_allowed(self, client):
        assert client.put("/api/blog/posts").status_code == 405


class TestSettings:
    """Tests for environment-driven settings"""

    def test_lists_are_parsed(self):
        settings = Settings(
            _env_file=None,
            cors_origins="http://a.test, http://b.test,",
            admin_emails=" Owner@Example.com ,second@example.com"
        )
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
        assert settings.admin_emails_list == ["owner@example.com", "second@example.com"]

    def test_supabase_configured(self):
        assert not Settings(_env_file=None, supabase_url="", supabase_anon_key="").is_supabase_configured
        assert Settings(_env_file=None, supabase_url="https://x.supabase.co", supabase_anon_key="k").is_supabase_configured

    @pytest.mark.parametrize("env,expected", [("production", True), ("development", False)])
    def test_is_production(self, env, expected):
        assert Settings(_env_file=None, app_env=env).is_production is expected
