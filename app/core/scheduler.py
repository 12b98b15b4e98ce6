"""
Application Scheduler - APScheduler Integration

Runs the periodic job-expiry sweep inside the FastAPI process.
"""

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings

logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "job_expiry_sweep"

# Global scheduler instance
scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={
        "coalesce": True,  # Combine missed runs into one
        "max_instances": 1,  # Never run two sweeps at once
        "misfire_grace_time": 3600,
    },
)


def scheduler_listener(event):
    """Log the outcome of every scheduled run."""
    if event.exception:
        logger.error(f"❌ Job '{event.job_id}' failed with exception: {event.exception}")
    else:
        logger.info(f"✅ Job '{event.job_id}' executed successfully")


scheduler.add_listener(scheduler_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)


async def run_expiry_sweep(workflow) -> int:
    """Scheduled task: expire approved jobs whose deadline has passed."""
    logger.info("⏰ Running job expiry sweep")
    return await workflow.expire_jobs()


def setup_jobs(workflow, interval_hours: Optional[int] = None):
    """Register the expiry sweep."""
    interval_hours = interval_hours or settings.JOB_EXPIRY_SWEEP_HOURS
    scheduler.add_job(
        run_expiry_sweep,
        IntervalTrigger(hours=interval_hours),
        args=[workflow],
        id=EXPIRY_JOB_ID,
        name=f"Job Expiry Sweep (every {interval_hours} hours)",
        replace_existing=True,
    )
    logger.info(f"   ✅ Added: {EXPIRY_JOB_ID} (every {interval_hours} hours)")


def start_scheduler(workflow):
    """
    Start the scheduler.

    Called during application startup (in lifespan).
    """
    if scheduler.running:
        logger.warning("⚠️  Scheduler already running")
        return

    setup_jobs(workflow)
    scheduler.start()
    logger.info("🚀 Scheduler started successfully")
    for job in scheduler.get_jobs():
        logger.info(f"   • {job.name} (next run: {job.next_run_time})")


def stop_scheduler():
    """
    Stop the scheduler.

    Called during application shutdown (in lifespan).
    """
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("🛑 Scheduler stopped")


def _isoformat(value) -> Optional[str]:
    # Jobs added before start() have no next run time yet
    return value.isoformat() if value else None


def get_scheduler_status() -> dict:
    """Scheduler state and next run times."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "total_jobs": len(jobs),
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": _isoformat(getattr(job, "next_run_time", None)),
                "trigger": str(job.trigger),
            }
            for job in jobs
        ],
    }
