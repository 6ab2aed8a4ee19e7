"""
Portfolio Hours Routes
Subjects, work entries and achievements for the hours dashboard
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
import time

from portfolio.database import Database
from portfolio.engines.stats_engine import create_stats_engine
from portfolio.middleware.auth import require_specialized
from portfolio.models import (
    AchievementCreate,
    SubjectCreate,
    SubjectUpdate,
    WorkEntryCreate,
    WorkEntryUpdate,
)
from portfolio.services.statistics_service import refresh_statistics, reconcile_subjects


router = APIRouter()


def _owned(row: dict, user: dict, label: str) -> dict:
    """404 unless the row exists and belongs to the caller"""
    if not row or row.get("user_id") != user["id"]:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


# ==========================================
# Subjects
# ==========================================

@router.get("/subjects")
async def get_subjects(user: dict = Depends(require_specialized)):
    """Subjects with their progress towards target hours"""
    db = Database(use_admin=True)
    subjects = await db.get_subjects(user["id"])
    engine = create_stats_engine(user["id"])
    return {
        "success": True,
        "data": engine.compute_subject_breakdown(subjects)
    }


@router.post("/subjects")
async def create_subject(data: SubjectCreate, user: dict = Depends(require_specialized)):
    """Create a subject to log hours against"""
    logger.info(f"[HOURS] POST /subjects - user: {user['id']}, name: {data.name}")
    db = Database(use_admin=True)
    subject = await db.create_subject({
        "user_id": user["id"],
        "name": data.name,
        "target_hours": data.target_hours,
        "icon": data.icon,
        "current_hours": 0,
        "completed": False
    })
    if not subject:
        raise HTTPException(status_code=500, detail="Failed to create subject")

    engine = create_stats_engine(user["id"])
    return {
        "success": True,
        "data": {**subject, **engine.compute_subject_progress(subject)}
    }


@router.patch("/subjects/{subject_id}")
async def update_subject(subject_id: str, data: SubjectUpdate, user: dict = Depends(require_specialized)):
    """Rename a subject, change its icon or move its target"""
    db = Database(use_admin=True)
    subject = _owned(await db.get_subject(subject_id), user, "Subject")

    update_data = data.model_dump(exclude_none=True)
    if not update_data:
        return {"message": "No changes provided"}

    engine = create_stats_engine(user["id"])
    if "target_hours" in update_data:
        update_data["completed"] = engine.compute_subject_progress(
            {**subject, "target_hours": update_data["target_hours"]}
        )["completed"]

    updated = await db.update_subject(subject_id, update_data)
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update subject")

    return {
        "success": True,
        "data": {**updated, **engine.compute_subject_progress(updated)}
    }


@router.delete("/subjects/{subject_id}")
async def delete_subject(subject_id: str, user: dict = Depends(require_specialized)):
    """Delete a subject; its work entries go with it"""
    db = Database(use_admin=True)
    _owned(await db.get_subject(subject_id), user, "Subject")

    if not await db.delete_subject(subject_id):
        raise HTTPException(status_code=500, detail="Failed to delete subject")

    stats = await refresh_statistics(db, user["id"])
    logger.info(f"[HOURS] Subject {subject_id} deleted by {user['id']}")
    return {
        "success": True,
        "message": "Subject deleted",
        "statistics": stats
    }


@router.post("/subjects/{subject_id}/reconcile")
async def reconcile_subject(subject_id: str, user: dict = Depends(require_specialized)):
    """Rebuild a subject's hours from its work entries"""
    db = Database(use_admin=True)
    _owned(await db.get_subject(subject_id), user, "Subject")

    updated = await reconcile_subjects(db, user["id"], [subject_id])
    engine = create_stats_engine(user["id"])
    return {
        "success": True,
        "data": engine.compute_subject_breakdown(updated)
    }


# ==========================================
# Work Entries
# ==========================================

@router.get("/entries")
async def get_work_entries(
    limit: int = Query(20, ge=1, le=500),
    user: dict = Depends(require_specialized)
):
    """Most recent work entries with their subject"""
    db = Database(use_admin=True)
    entries = await db.get_work_entries(user["id"], limit=limit)
    return {
        "success": True,
        "data": entries
    }


@router.post("/entries")
async def create_work_entry(data: WorkEntryCreate, user: dict = Depends(require_specialized)):
    """Log a work session, then refresh statistics and the subject's running total"""
    start_time = time.time()
    logger.info(f"[HOURS] === CREATE WORK ENTRY ===")
    logger.info(f"[HOURS] User: {user['id']}, subject: {data.subject_id}, hours: {data.hours}, date: {data.entry_date}")

    db = Database(use_admin=True)
    subject = _owned(await db.get_subject(data.subject_id), user, "Subject")

    entry = await db.create_work_entry({
        "user_id": user["id"],
        "subject_id": data.subject_id,
        "hours": data.hours,
        "description": data.description,
        "entry_date": data.entry_date.isoformat()
    })
    if not entry:
        raise HTTPException(status_code=500, detail="Failed to create work entry")

    stats = await refresh_statistics(db, user["id"])

    engine = create_stats_engine(user["id"])
    subject_fields = engine.apply_entry_to_subject(subject, data.hours)
    updated_subject = await db.update_subject(subject["id"], subject_fields)

    elapsed = (time.time() - start_time) * 1000
    logger.info(f"[HOURS] Work entry {entry.get('id')} logged in {elapsed:.2f}ms")
    return {
        "success": True,
        "data": entry,
        "statistics": stats,
        "subject": updated_subject or {**subject, **subject_fields}
    }


@router.patch("/entries/{entry_id}")
async def update_work_entry(entry_id: str, data: WorkEntryUpdate, user: dict = Depends(require_specialized)):
    """Edit a work session; affected subjects are rebuilt from their entries"""
    db = Database(use_admin=True)
    entry = _owned(await db.get_work_entry(entry_id), user, "Work entry")

    update_data = data.model_dump(exclude_none=True)
    if not update_data:
        return {"message": "No changes provided"}

    if "subject_id" in update_data:
        _owned(await db.get_subject(update_data["subject_id"]), user, "Subject")
    if "entry_date" in update_data:
        update_data["entry_date"] = update_data["entry_date"].isoformat()

    updated = await db.update_work_entry(entry_id, update_data)
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update work entry")

    stats = await refresh_statistics(db, user["id"])
    subjects = await reconcile_subjects(
        db, user["id"], {entry.get("subject_id"), update_data.get("subject_id")}
    )

    logger.info(f"[HOURS] Work entry {entry_id} updated by {user['id']}")
    return {
        "success": True,
        "data": updated,
        "statistics": stats,
        "subjects": subjects
    }


@router.delete("/entries/{entry_id}")
async def delete_work_entry(entry_id: str, user: dict = Depends(require_specialized)):
    """Remove a work session and roll back its hours"""
    db = Database(use_admin=True)
    entry = _owned(await db.get_work_entry(entry_id), user, "Work entry")

    if not await db.delete_work_entry(entry_id):
        raise HTTPException(status_code=500, detail="Failed to delete work entry")

    stats = await refresh_statistics(db, user["id"])
    subjects = await reconcile_subjects(db, user["id"], [entry.get("subject_id")])

    logger.info(f"[HOURS] Work entry {entry_id} deleted by {user['id']}")
    return {
        "success": True,
        "message": "Work entry deleted",
        "statistics": stats,
        "subjects": subjects
    }


# ==========================================
# Achievements
# ==========================================

@router.get("/achievements")
async def get_achievements(user: dict = Depends(require_specialized)):
    """All achievements, newest first"""
    db = Database(use_admin=True)
    achievements = await db.get_achievements(user["id"])
    return {
        "success": True,
        "data": achievements
    }


@router.post("/achievements")
async def create_achievement(data: AchievementCreate, user: dict = Depends(require_specialized)):
    """Add a custom achievement"""
    db = Database(use_admin=True)
    achievement = await db.create_achievement({"user_id": user["id"], **data.model_dump()})
    if not achievement:
        raise HTTPException(status_code=500, detail="Failed to create achievement")
    return {
        "success": True,
        "data": achievement
    }


@router.post("/achievements/{achievement_id}/toggle")
async def toggle_achievement(achievement_id: str, user: dict = Depends(require_specialized)):
    """Flip an achievement between done and not done"""
    db = Database(use_admin=True)
    achievement = _owned(await db.get_achievement(achievement_id), user, "Achievement")

    completed = not achievement.get("completed", False)
    updated = await db.update_achievement(achievement_id, {
        "completed": completed,
        "completed_at": datetime.now(timezone.utc).isoformat() if completed else None
    })
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update achievement")

    logger.info(f"[HOURS] Achievement {achievement_id} marked {'complete' if completed else 'incomplete'}")
    return {
        "success": True,
        "data": updated
    }
