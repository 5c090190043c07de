"""Celery task that permanently removes trash past its retention window."""

import logging

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.database import SessionLocal
from src.services.lifecycle import LifecycleEngine

logger = logging.getLogger(__name__)


@celery_app.task
def purge_expired_trash(retention_days: int | None = None, dry_run: bool = False) -> dict:
    """Purge trashed projects, lists and tasks whose retention window has passed.

    Runs daily via celery-beat.

    Args:
        retention_days: Override the per-plan retention window for every owner
        dry_run: Report what would be purged without deleting anything

    Returns:
        dict with per-kind counts
    """
    db: Session = SessionLocal()
    try:
        result = LifecycleEngine(db).purge_expired(retention_days=retention_days, dry_run=dry_run)
        counts = result.count_by_kind()
        logger.info(f"Trash cleanup finished (dry_run={dry_run}): {counts}")
        return {"dry_run": dry_run, "total": result.affected, **counts}
    finally:
        db.close()
