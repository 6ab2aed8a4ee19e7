"""
Portfolio Projects Routes
Public showcase with admin-only editing
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from portfolio.database import Database
from portfolio.engines.access_engine import get_permissions
from portfolio.middleware.auth import get_optional_user, require_admin
from portfolio.models import ProjectCreate, ProjectUpdate


router = APIRouter()


def _serialize(data: dict) -> dict:
    """Turn enum and date fields into column values"""
    if data.get("status") is not None:
        data["status"] = getattr(data["status"], "value", data["status"])
    if data.get("start_date") is not None:
        data["start_date"] = data["start_date"].isoformat()
    return data


@router.get("/")
async def get_projects(user: Optional[dict] = Depends(get_optional_user)):
    """All projects; an admin sees the ones they own"""
    db = Database(use_admin=True)
    is_admin = bool(user) and get_permissions(user.get("role")).is_admin
    projects = await db.get_projects(user["id"] if is_admin else None)
    logger.info(f"[PROJECTS] GET / - admin view: {is_admin}, count: {len(projects)}")
    return {
        "success": True,
        "data": projects
    }


@router.get("/{project_id}")
async def get_project(project_id: str):
    """Get a single project"""
    db = Database(use_admin=True)
    project = await db.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return {
        "success": True,
        "data": project
    }


@router.post("/")
async def create_project(data: ProjectCreate, user: dict = Depends(require_admin)):
    """Create a project"""
    logger.info(f"[PROJECTS] POST / - user: {user['id']}, title: {data.title}")
    db = Database(use_admin=True)
    payload = _serialize(data.model_dump(exclude_none=True))
    project = await db.create_project({"user_id": user["id"], **payload})

    if not project:
        raise HTTPException(status_code=500, detail="Failed to create project")

    return {
        "success": True,
        "data": project
    }


@router.patch("/{project_id}")
async def update_project(project_id: str, data: ProjectUpdate, user: dict = Depends(require_admin)):
    """Update a project"""
    db = Database(use_admin=True)
    project = await db.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    update_data = _serialize(data.model_dump(exclude_none=True))
    if not update_data:
        return {"message": "No changes provided"}

    updated = await db.update_project(project_id, update_data)
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update project")

    logger.info(f"[PROJECTS] Project {project_id} updated by {user['id']}")
    return {
        "success": True,
        "data": updated
    }


@router.delete("/{project_id}")
async def delete_project(project_id: str, user: dict = Depends(require_admin)):
    """Delete a project"""
    db = Database(use_admin=True)
    project = await db.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    if not await db.delete_project(project_id):
        raise HTTPException(status_code=500, detail="Failed to delete project")

    logger.info(f"[PROJECTS] Project {project_id} deleted by {user['id']}")
    return {
        "success": True,
        "message": "Project deleted"
    }
