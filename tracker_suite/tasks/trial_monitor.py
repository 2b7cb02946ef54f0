"""Trial Monitor - periodic trial warning and expiry sweep.

Every TRIAL_MONITOR_INTERVAL_HOURS the monitor emails users whose trial ends
within TRIAL_WARNING_DAYS and moves lapsed trials to ``expired``. Disabled
unless TRIAL_MONITOR_ENABLED is set; admins can also trigger a sweep through
the API.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tracker_suite.config import settings
from tracker_suite.database import async_session_maker
from tracker_suite.services.email_service import get_email_service
from tracker_suite.services.trial import run_trial_check

logger = logging.getLogger(__name__)

JOB_ID = "trial_monitor"

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the scheduler instance."""
    global scheduler
    if scheduler is None:
        scheduler = AsyncIOScheduler()
    return scheduler


async def check_trials():
    """Scheduled job body. Failures are logged so the next run still happens."""
    logger.info("Running trial status check...")
    try:
        async with async_session_maker() as db:
            await run_trial_check(db, get_email_service())
    except Exception as e:
        logger.error(f"Error during trial check: {type(e).__name__}: {e}")


def start_trial_monitor():
    """Schedule the sweep and start the scheduler."""
    scheduler = get_scheduler()

    scheduler.add_job(
        check_trials,
        IntervalTrigger(hours=settings.TRIAL_MONITOR_INTERVAL_HOURS),
        id=JOB_ID,
        name="Check trial statuses",
        replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()
        logger.info(
            "Trial monitor started",
            extra={"interval_hours": settings.TRIAL_MONITOR_INTERVAL_HOURS},
        )


def stop_trial_monitor():
    """Stop the trial monitor."""
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Trial monitor stopped")
