"""Run one reminder pass and exit - for cron deployments without the scheduler."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.database import database
from app.services.email_service import get_email_service
from app.services.reminder_service import ReminderService
from app.utils.clock import Clock
from app.utils.logger import setup_logging


async def main() -> int:
    setup_logging(settings.log_level)
    await database.connect()
    try:
        service = ReminderService(database.db, get_email_service(), Clock(settings.tzinfo))
        report = await service.run_tick()
    finally:
        await database.disconnect()

    print(
        f"Processed {report.processed}: {report.sent} sent, "
        f"{report.skipped} skipped, {report.failed} failed"
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
