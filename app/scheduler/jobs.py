"""
app/scheduler/jobs.py

APScheduler-based scheduler for the daily URL import.

Schedule (UTC)
--------------
  daily_csv_import  DAILY_IMPORT_HOUR:DAILY_IMPORT_MINUTE every day (06:00 default)

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import DailyImportScheduleSettings, get_daily_import_schedule_settings
from app.repositories.unit_of_work import SqlAlchemyUnitOfWork
from app.services.daily_import_service import get_daily_import_service
from db.session import session_scope

logger = logging.getLogger(__name__)

DAILY_IMPORT_JOB_ID = "daily_csv_import"


# ---------------------------------------------------------------------------
# Job: Daily CSV import
# ---------------------------------------------------------------------------


def run_daily_csv_import() -> None:
    """
    Fetch the configured CSV and import it. Failures are logged, never raised,
    so one bad run cannot take the scheduler thread down.
    """
    logger.info("Scheduler: daily_csv_import starting")

    try:
        with session_scope() as db:
            result = get_daily_import_service().run(SqlAlchemyUnitOfWork(db))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scheduler: daily_csv_import crashed: %s", exc)
        return

    if result.success:
        stats = result.report.stats if result.report is not None else None
        logger.info(
            "Scheduler: daily_csv_import complete import_count=%s dates_written=%s",
            result.config.import_count,
            stats.dates_written if stats is not None else 0,
        )
    else:
        logger.warning("Scheduler: daily_csv_import did not import reason=%s", result.reason)


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(settings: DailyImportScheduleSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the periodic import job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    No job is registered when the schedule is disabled.
    """
    schedule = settings or get_daily_import_schedule_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not schedule.enabled:
        logger.info("Scheduler: daily_csv_import disabled by configuration")
        return scheduler

    scheduler.add_job(
        run_daily_csv_import,
        trigger="cron",
        hour=schedule.hour,
        minute=schedule.minute,
        id=DAILY_IMPORT_JOB_ID,
        name="Daily CSV import",
        replace_existing=True,
        misfire_grace_time=3600,
        max_instances=1,
        coalesce=True,
    )

    return scheduler
