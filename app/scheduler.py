"""Periodic reminder checks using APScheduler."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.config import settings
from app.database import database
from app.services.email_service import get_email_service
from app.services.reminder_service import ReminderService
from app.utils.clock import Clock

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "send_reminders"

_scheduler: AsyncIOScheduler | None = None


async def run_reminder_tick() -> None:
    """Job body: one reminder pass over the due subscriptions."""
    if database.db is None:
        logger.warning("Skipping reminder tick: database not connected")
        return

    service = ReminderService(
        database.db,
        get_email_service(),
        Clock(settings.tzinfo),
    )
    await service.run_tick()


def start_scheduler() -> AsyncIOScheduler | None:
    """
    Start the reminder scheduler.

    - Respects the REMINDERS_ENABLED setting
    - Does nothing if already started
    """
    global _scheduler

    if not settings.reminders_enabled:
        logger.info("Reminder scheduler disabled (REMINDERS_ENABLED=false)")
        return None

    if _scheduler is not None:
        logger.info("Reminder scheduler already running")
        return _scheduler

    _scheduler = AsyncIOScheduler(timezone=settings.tzinfo)
    _scheduler.add_job(
        run_reminder_tick,
        trigger="interval",
        minutes=settings.reminder_interval_minutes,
        id=REMINDER_JOB_ID,
        replace_existing=True,
        max_instances=1,  # no overlapping ticks
        coalesce=True,  # merge runs missed while down
    )
    _scheduler.start()

    logger.info(
        "Reminder scheduler started: every %d minutes (%s)",
        settings.reminder_interval_minutes,
        settings.timezone,
    )
    return _scheduler


def stop_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global _scheduler

    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Reminder scheduler stopped")
