"""Periodic jobs run by APScheduler: overdue sweep and integration polling."""
from __future__ import annotations
from datetime import date
from flask import Flask
from ..extensions import db, scheduler
from ..repositories.bill_repository import mark_overdue
from ..services.integration_service import sync_active_integrations
from ..utils.logging_utils import get_logger

logger = get_logger("tasks")

_scheduler_started = False


def mark_overdue_bills(today: date | None = None) -> int:
    """Flag unpaid bills whose due date has passed; returns how many changed."""
    count = mark_overdue(today or date.today())
    db.session.commit()
    if count:
        logger.info("Marked %s bill(s) overdue", count)
    return count


def register_jobs(app: Flask) -> None:
    def overdue_job():
        with app.app_context():
            try:
                mark_overdue_bills()
            except Exception:
                db.session.rollback()
                logger.exception("Overdue sweep failed")

    def sync_job():
        with app.app_context():
            synced = sync_active_integrations()
            logger.info("Scheduled integration sync finished: %s integration(s)", synced)

    scheduler.add_job(overdue_job, "interval", days=1, id="mark_overdue_bills", replace_existing=True)
    scheduler.add_job(
        sync_job,
        "interval",
        minutes=app.config["INTEGRATION_SYNC_MINUTES"],
        id="sync_active_integrations",
        replace_existing=True,
    )


def start_scheduler(app: Flask) -> None:
    """Register jobs and start the shared scheduler once per process."""
    global _scheduler_started
    if _scheduler_started or not app.config.get("SCHEDULER_ENABLED", True):
        return
    register_jobs(app)
    if not scheduler.running:
        scheduler.start()
    _scheduler_started = True
