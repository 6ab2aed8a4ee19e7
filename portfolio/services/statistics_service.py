"""
Statistics Service
Keeps the cached statistics row and subject totals in step with work entries
"""

from typing import Iterable, List, Optional
from loguru import logger

from portfolio.database import Database
from portfolio.engines.stats_engine import create_stats_engine
from portfolio.models import DerivedStatistics


async def refresh_statistics(db: Database, user_id: str) -> dict:
    """
    Rebuild a user's statistics from every work entry and store them.

    Safe to call any number of times; the stored row is only a cache.

    Returns:
        The freshly computed statistics (even if the write failed)
    """
    entries = await db.get_work_entries(user_id)
    computed = create_stats_engine(user_id).compute_statistics(entries)
    stats = DerivedStatistics(**computed).model_dump()

    saved = await db.upsert_statistics(user_id, stats)
    if saved is None:
        logger.warning(f"[STATS] Statistics for {user_id} computed but not stored")

    logger.info(f"[STATS] Refreshed statistics for {user_id}: {len(entries)} entries, streak {stats['current_streak']}")
    return stats


async def reconcile_subjects(
    db: Database,
    user_id: str,
    subject_ids: Optional[Iterable[str]] = None
) -> List[dict]:
    """
    Recompute current_hours and completed for subjects from their entries.

    Args:
        db: Database wrapper
        user_id: Owner of the subjects
        subject_ids: Restrict to these subjects (default: all of the user's subjects)

    Returns:
        The updated subject rows
    """
    engine = create_stats_engine(user_id)
    subjects = await db.get_subjects(user_id)

    if subject_ids is not None:
        wanted = {s for s in subject_ids if s}
        subjects = [s for s in subjects if s.get("id") in wanted]

    updated = []
    for subject in subjects:
        entries = await db.get_work_entries_for_subject(subject["id"])
        fields = engine.reconcile_subject(subject, entries)
        row = await db.update_subject(subject["id"], fields)
        updated.append(row or {**subject, **fields})

    logger.info(f"[STATS] Reconciled {len(updated)} subjects for {user_id}")
    return updated
