"""
Portfolio Stats Routes
Derived statistics and chart series for the hours dashboard
"""

from datetime import timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger

from portfolio.database import Database
from portfolio.engines.stats_engine import create_stats_engine
from portfolio.middleware.auth import require_specialized
from portfolio.models import DerivedStatistics
from portfolio.services.statistics_service import refresh_statistics, reconcile_subjects


router = APIRouter()


def _year_bounds(year: int):
    return f"{year}-01-01", f"{year}-12-31"


@router.get("/")
async def get_statistics(user: dict = Depends(require_specialized)):
    """Cached statistics, rebuilt on the spot when no row exists yet"""
    db = Database(use_admin=True)
    stored = await db.get_statistics(user["id"])

    if stored is None:
        logger.info(f"[STATS] No statistics row for {user['id']}, rebuilding")
        stats = await refresh_statistics(db, user["id"])
        return {
            "success": True,
            "data": stats
        }

    return {
        "success": True,
        "data": DerivedStatistics.model_validate(stored).model_dump(),
        "updated_at": stored.get("updated_at")
    }


@router.post("/recompute")
async def recompute_statistics(user: dict = Depends(require_specialized)):
    """Throw away the cache and rebuild statistics and subject totals from work entries"""
    logger.info(f"[STATS] === RECOMPUTE === user: {user['id']}")
    db = Database(use_admin=True)
    stats = await refresh_statistics(db, user["id"])
    subjects = await reconcile_subjects(db, user["id"])
    engine = create_stats_engine(user["id"])
    return {
        "success": True,
        "data": stats,
        "subjects": engine.compute_subject_breakdown(subjects)
    }


@router.get("/last-seven-days")
async def get_last_seven_days(user: dict = Depends(require_specialized)):
    """Daily hours for the week ending today"""
    db = Database(use_admin=True)
    engine = create_stats_engine(user["id"])
    start = engine.today - timedelta(days=6)
    entries = await db.get_work_entries(user["id"], start.isoformat(), engine.today.isoformat())
    return {
        "success": True,
        "data": engine.compute_last_seven_days(entries)
    }


@router.get("/monthly")
async def get_monthly_breakdown(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    user: dict = Depends(require_specialized)
):
    """Hours, days worked and per-day average for each month of a year"""
    db = Database(use_admin=True)
    engine = create_stats_engine(user["id"])
    year = year or engine.today.year
    entries = await db.get_work_entries(user["id"], *_year_bounds(year))
    return {
        "success": True,
        "data": engine.compute_monthly_breakdown(entries, year),
        "year": year
    }


@router.get("/annual")
async def get_annual_series(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    user: dict = Depends(require_specialized)
):
    """Day-by-day hours for a year with a running average and summary"""
    db = Database(use_admin=True)
    engine = create_stats_engine(user["id"])
    year = year or engine.today.year
    entries = await db.get_work_entries(user["id"], *_year_bounds(year))
    return {
        "success": True,
        "data": engine.compute_annual_series(entries, year)
    }


@router.get("/daily-totals")
async def get_daily_totals(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    user: dict = Depends(require_specialized)
):
    """Total hours per logged day"""
    db = Database(use_admin=True)
    engine = create_stats_engine(user["id"])
    year = year or engine.today.year
    entries = await db.get_work_entries(user["id"], *_year_bounds(year))
    return {
        "success": True,
        "data": engine.compute_daily_totals(entries, year),
        "year": year
    }
