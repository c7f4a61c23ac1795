"""Celery worker configuration.

Runs the scheduled jobs of the booking service:
- Appointment reminder SMS for the day's confirmed bookings
"""

from celery import Celery
from celery.schedules import crontab

from repairshop.config import settings

# Create Celery app
celery_app = Celery(
    "repairshop_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["repairshop.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.timezone,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=3600,

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        # Remind customers of tomorrow's appointments (shop-local time)
        "send-appointment-reminders": {
            "task": "repairshop.tasks.send_appointment_reminders",
            "schedule": crontab(hour=settings.reminder_hour, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
