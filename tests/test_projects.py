"""
Portfolio Projects API Tests
Public showcase with admin-only editing
"""

import pytest
from unittest.mock import patch
import uuid


@pytest.fixture
def db(mock_database):
    with patch("portfolio.routes.projects.Database", return_value=mock_database):
        yield mock_database


@pytest.fixture
def mock_project(mock_admin_user):
    return {
        "id": str(uuid.uuid4()),
        "user_id": mock_admin_user["id"],
        "title": "Portfolio",
        "description": "This site",
        "technologies": ["FastAPI", "Supabase"],
        "status": "In Progress"
    }


class TestListProjects:
    """Tests for GET /api/projects endpoint"""

    def test_anonymous_sees_all(self, client, login_as, db, mock_project):
        login_as(None)
        db.get_projects.return_value = [mock_project]

        response = client.get("/api/projects/")

        assert response.status_code == 200
        assert response.json()["data"][0]["title"] == "Portfolio"
        db.get_projects.assert_awaited_once_with(None)

    def test_admin_sees_own(self, client, login_as, db, mock_admin_user):
        login_as(mock_admin_user)
        client.get("/api/projects/")
        db.get_projects.assert_awaited_once_with(mock_admin_user["id"])

    def test_get_single(self, client, db, mock_project):
        db.get_project.return_value = mock_project
        response = client.get(f"/api/projects/{mock_project['id']}")
        assert response.status_code == 200

    def test_get_missing(self, client, db):
        response = client.get(f"/api/projects/{uuid.uuid4()}")
        assert response.status_code == 404


class TestWriteProjects:
    """Tests for POST/PATCH/DELETE /api/projects endpoints"""

    def test_create_requires_admin(self, client, login_as, mock_specialized_user):
        login_as(mock_specialized_user)
        response = client.post("/api/projects/", json={"title": "T", "description": "D"})
        assert response.status_code == 403

    def test_create_serializes_fields(self, client, login_as, db, mock_admin_user):
        """Should store the status label and an ISO start date"""
        login_as(mock_admin_user)
        db.create_project.side_effect = lambda data: {"id": "p1", **data}

        response = client.post("/api/projects/", json={
            "title": "T",
            "description": "D",
            "status": "Completed",
            "start_date": "2025-09-01",
            "technologies": ["Python"]
        })

        assert response.status_code == 200
        stored = db.create_project.call_args[0][0]
        assert stored["status"] == "Completed"
        assert stored["start_date"] == "2025-09-01"
        assert stored["user_id"] == mock_admin_user["id"]

    def test_create_invalid_status(self, client, login_as, mock_admin_user):
        login_as(mock_admin_user)
        response = client.post("/api/projects/", json={"title": "T", "description": "D", "status": "Abandoned"})
        assert response.status_code == 422

    def test_update_status(self, client, login_as, db, mock_project, mock_admin_user):
        login_as(mock_admin_user)
        db.get_project.return_value = mock_project
        db.update_project.return_value = {**mock_project, "status": "On Hold"}

        response = client.patch(f"/api/projects/{mock_project['id']}", json={"status": "On Hold"})

        assert response.status_code == 200
        db.update_project.assert_awaited_once_with(mock_project["id"], {"status": "On Hold"})

    def test_update_missing(self, client, login_as, db, mock_admin_user):
        login_as(mock_admin_user)
        response = client.patch(f"/api/projects/{uuid.uuid4()}", json={"title": "X"})
        assert response.status_code == 404

    def test_delete(self, client, login_as, db, mock_project, mock_admin_user):
        login_as(mock_admin_user)
        db.get_project.return_value = mock_project
        response = client.delete(f"/api/projects/{mock_project['id']}")
        assert response.status_code == 200
        assert response.json()["message"] == "Project deleted"

    def test_delete_failure(self, client, login_as, db, mock_project, mock_admin_user):
        login_as(mock_admin_user)
        db.get_project.return_value = mock_project
        db.delete_project.return_value = False
        response = client.delete(f"/api/projects/{mock_project['id']}")
        assert response.status_code == 500
