"""Scheduler for the daily expiry notification run."""

import logging
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from stockpile.core.config import settings
from stockpile.core.scheduler_tracker import run_tracked_job
from stockpile.services import notification_service


logger = logging.getLogger(__name__)

EXPIRY_NOTIFICATIONS_JOB = "expiry_notifications"

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone=ZoneInfo(settings.timezone))


async def run_expiry_notifications() -> None:
    """Scan the inventory and push today's expiry notifications."""
    await run_tracked_job(notification_service.send_expiry_notifications, EXPIRY_NOTIFICATIONS_JOB)


def start_scheduler() -> None:
    """Register jobs and start the scheduler.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        run_expiry_notifications,
        trigger=CronTrigger(hour=settings.notification_hour, minute=0, timezone=ZoneInfo(settings.timezone)),
        id=EXPIRY_NOTIFICATIONS_JOB,
        name="Send Expiry Notifications",
        replace_existing=True,
    )
    logger.info(f"Scheduled expiry notifications job: daily at {settings.notification_hour}:00 ({settings.timezone})")

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
