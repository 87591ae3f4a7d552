"""Background scheduler for post-write metrics refreshes.

Manages one-shot per-user jobs that refresh cached metrics after trade writes.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def _job_id(user_id: str) -> str:
    return f"refresh_{user_id}"


def queue_metrics_refresh(service, user_id: str) -> bool:
    """Queue (or replace) a refresh job for a user. No-op when the scheduler is stopped."""
    from journal.engine.refresh_job import run_metrics_refresh

    if not scheduler.running:
        logger.debug(f"Scheduler not running; skipping refresh for user {user_id}")
        return False

    scheduler.add_job(
        run_metrics_refresh,
        trigger=DateTrigger(run_date=datetime.now(timezone.utc)),
        args=[service, user_id],
        id=_job_id(user_id),
        name=f"Refresh metrics for {user_id}",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    logger.debug(f"Queued metrics refresh for user {user_id}")
    return True


def start_scheduler():
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler():
    """Stop the scheduler; queued refreshes are dropped."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Running flag and pending refresh jobs, for the system API."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "job_count": len(jobs),
        "jobs": [
            {
                "id": j.id,
                "name": j.name,
                "next_run": str(j.next_run_time) if getattr(j, "next_run_time", None) else None,
                "trigger": str(j.trigger),
            }
            for j in jobs
        ],
    }
