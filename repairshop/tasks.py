"""Celery background tasks."""

import asyncio
import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from celery import shared_task

from repairshop.config import settings
from repairshop.database import close_db, get_db_context
from repairshop.repositories.sql import SQLAlchemyStore
from repairshop.services.booking_service import BookingService
from repairshop.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def reminder_day(day: str | None = None, now: datetime | None = None) -> date:
    """Shop-local day a reminder run covers; tomorrow unless given."""
    if day:
        return date.fromisoformat(day)
    local_now = now or datetime.now(ZoneInfo(settings.timezone))
    return local_now.date() + timedelta(days=1)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


# ==================== NOTIFICATION TASKS ====================


@shared_task(bind=True, max_retries=3)
def send_appointment_reminders(self, day: str | None = None):
    """Send reminder SMS for confirmed appointments.

    Args:
        day: ISO date in shop-local time; defaults to tomorrow
    """
    target = reminder_day(day)
    try:
        sent = run_async(_send_appointment_reminders(target))
        return {"status": "success", "day": target.isoformat(), "sent": sent}
    except Exception as exc:
        logger.exception(f"Reminder run for {target.isoformat()} failed")
        raise self.retry(exc=exc, countdown=300)


async def _send_appointment_reminders(day: date) -> int:
    """Async implementation of appointment reminders."""
    try:
        async with get_db_context() as db:
            service = BookingService(SQLAlchemyStore(db), notification_service)
            return await service.send_appointment_reminders(day)
    finally:
        # Each run gets a fresh event loop; pooled connections cannot outlive it
        await notification_service.close()
        await close_db()
