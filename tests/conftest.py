"""
Portfolio Test Configuration
Shared fixtures and mocks for all tests
"""

import pytest
from unittest.mock import MagicMock, AsyncMock, patch
from datetime import date, timedelta
from fastapi.testclient import TestClient
import uuid


TODAY = date(2026, 3, 15)


# Mock settings before importing app
@pytest.fixture(scope="session", autouse=True)
def mock_settings():
    """Mock settings for all tests"""
    with patch("portfolio.config.get_settings") as mock:
        mock.return_value = MagicMock(
            app_env="test",
            debug=True,
            host="0.0.0.0",
            port=8000,
            supabase_url="https://test.supabase.co",
            supabase_anon_key="test-anon-key",
            supabase_service_key="test-service-key",
            supabase_jwt_secret="test-jwt-secret-at-least-32-characters",
            admin_emails="owner@example.com",
            admin_emails_list=["owner@example.com"],
            is_supabase_configured=False,
            cors_origins="http://localhost:5173",
            cors_origins_list=["http://localhost:5173"]
        )
        yield mock


# ==========================================
# Mock User Fixtures
# ==========================================

@pytest.fixture
def mock_admin_user():
    """Site owner"""
    return {
        "id": str(uuid.uuid4()),
        "email": "owner@example.com",
        "role": "admin",
        "token_used": None
    }


@pytest.fixture
def mock_specialized_user():
    """User who signed up with an access token"""
    return {
        "id": str(uuid.uuid4()),
        "email": "student@example.com",
        "role": "specialized",
        "token_used": "SPEC_ACCESS_2025"
    }


@pytest.fixture
def mock_regular_user():
    """Plain reader account"""
    return {
        "id": str(uuid.uuid4()),
        "email": "reader@example.com",
        "role": "regular",
        "token_used": None
    }


# ==========================================
# Mock Data Fixtures
# ==========================================

@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def mock_subject(mock_specialized_user):
    """Subject halfway to its target"""
    return {
        "id": str(uuid.uuid4()),
        "user_id": mock_specialized_user["id"],
        "name": "Linear Algebra",
        "icon": "📐",
        "target_hours": 20,
        "current_hours": 10,
        "completed": False,
        "created_at": "2026-01-01T00:00:00+00:00"
    }


@pytest.fixture
def mock_work_entries(mock_specialized_user, mock_subject):
    """Three consecutive days ending on TODAY"""
    return [
        {
            "id": str(uuid.uuid4()),
            "user_id": mock_specialized_user["id"],
            "subject_id": mock_subject["id"],
            "hours": hours,
            "description": f"Session {i}",
            "entry_date": (TODAY - timedelta(days=i)).isoformat()
        }
        for i, hours in enumerate([4, 3, 2])
    ]


# ==========================================
# Database Mock Fixture
# ==========================================

@pytest.fixture
def mock_database():
    """Mock database with all methods"""
    db = MagicMock()

    # Profile and token methods
    db.get_profile = AsyncMock(return_value=None)
    db.create_profile = AsyncMock(return_value=None)
    db.count_profiles_by_role = AsyncMock(return_value={})
    db.get_active_token = AsyncMock(return_value=None)
    db.get_token = AsyncMock(return_value=None)
    db.is_token_valid = AsyncMock(return_value=False)
    db.get_tokens = AsyncMock(return_value=[])
    db.create_token = AsyncMock(return_value=None)
    db.deactivate_token = AsyncMock(return_value=None)

    # Blog methods
    db.get_blog_posts = AsyncMock(return_value=[])
    db.get_blog_post = AsyncMock(return_value=None)
    db.create_blog_post = AsyncMock(return_value=None)
    db.update_blog_post = AsyncMock(return_value=None)
    db.delete_blog_post = AsyncMock(return_value=True)
    db.get_comments = AsyncMock(return_value=[])
    db.get_comment = AsyncMock(return_value=None)
    db.create_comment = AsyncMock(return_value=None)
    db.update_comment = AsyncMock(return_value=None)
    db.delete_comment = AsyncMock(return_value=True)

    # Project methods
    db.get_projects = AsyncMock(return_value=[])
    db.get_project = AsyncMock(return_value=None)
    db.create_project = AsyncMock(return_value=None)
    db.update_project = AsyncMock(return_value=None)
    db.delete_project = AsyncMock(return_value=True)

    # Hours methods
    db.get_subjects = AsyncMock(return_value=[])
    db.get_subject = AsyncMock(return_value=None)
    db.create_subject = AsyncMock(return_value=None)
    db.update_subject = AsyncMock(return_value=None)
    db.delete_subject = AsyncMock(return_value=True)
    db.get_work_entries = AsyncMock(return_value=[])
    db.get_work_entries_for_subject = AsyncMock(return_value=[])
    db.get_work_entry = AsyncMock(return_value=None)
    db.create_work_entry = AsyncMock(return_value=None)
    db.update_work_entry = AsyncMock(return_value=None)
    db.delete_work_entry = AsyncMock(return_value=True)
    db.get_achievements = AsyncMock(return_value=[])
    db.get_achievement = AsyncMock(return_value=None)
    db.create_achievement = AsyncMock(return_value=None)
    db.update_achievement = AsyncMock(return_value=None)

    # Statistics methods
    db.get_statistics = AsyncMock(return_value=None)
    db.upsert_statistics = AsyncMock(return_value={})

    return db


# ==========================================
# App Test Client Fixtures
# ==========================================

@pytest.fixture
def app():
    """Get the FastAPI app"""
    from portfolio.main import create_app
    return create_app()


@pytest.fixture
def client(app):
    """Sync test client"""
    return TestClient(app)


@pytest.fixture
def login_as(app):
    """Make every request come from the given user (None for anonymous)"""
    from portfolio.middleware.auth import get_current_user, get_optional_user

    def _login(user):
        async def optional_user():
            return user

        async def current_user():
            return user

        app.dependency_overrides[get_optional_user] = optional_user
        if user is not None:
            app.dependency_overrides[get_current_user] = current_user
        return user

    yield _login
    app.dependency_overrides.clear()


# ==========================================
# Auth Mock Fixtures
# ==========================================

@pytest.fixture
def mock_auth_header():
    """Bearer header; the user behind it comes from login_as"""
    return {"Authorization": "Bearer valid-test-token"}


@pytest.fixture
def mock_invalid_auth_header():
    """Mock invalid auth header"""
    return {"Authorization": "Bearer invalid-token"}
