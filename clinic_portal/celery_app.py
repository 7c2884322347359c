"""
Celery application configuration.

Workers:
    celery -A celery_app worker --loglevel=info
Daily reminders:
    celery -A celery_app beat --loglevel=info
"""
from celery import Celery
from celery.schedules import crontab
from celery.signals import after_setup_logger, after_setup_task_logger

from core.config import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_SERIALIZER,
    CELERY_RESULT_SERIALIZER,
    CELERY_ACCEPT_CONTENT,
    CELERY_TIMEZONE,
    CELERY_ENABLE_UTC,
)
from core.logging_config import setup_worker_logging

celery_app = Celery(
    "clinic_portal",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["tasks.email_tasks", "tasks.reminder_tasks"]
)

celery_app.conf.update(
    task_serializer=CELERY_TASK_SERIALIZER,
    result_serializer=CELERY_RESULT_SERIALIZER,
    accept_content=CELERY_ACCEPT_CONTENT,
    timezone=CELERY_TIMEZONE,
    enable_utc=CELERY_ENABLE_UTC,
    beat_schedule={
        "send-form-reminders": {
            "task": "tasks.reminder_tasks.send_form_reminders_task",
            "schedule": crontab(hour=14, minute=0),
        },
    },
)

after_setup_logger.connect(setup_worker_logging)
after_setup_task_logger.connect(setup_worker_logging)
