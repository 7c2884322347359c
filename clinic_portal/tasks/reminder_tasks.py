"""
Celery beat task for onboarding form reminders.

Runs once a day (see celery_app.beat_schedule). The sweep itself lives in
ReminderService; this task only assembles the service and records metrics.
"""
import logging
from typing import Dict

from celery import shared_task

from core.dependencies import build_reminder_service

logger = logging.getLogger(__name__)


def _record_task_metrics(task_name: str, success: bool) -> None:
    """
    Record task completion metrics.

    Safe to call even if the metrics collector is unavailable.
    """
    try:
        from core.middleware import get_metrics_collector
        get_metrics_collector().record_task_result(task_name, success=success)
    except Exception as e:
        logger.warning(f"Failed to record task metrics: {e}")


@shared_task(bind=True)
def send_form_reminders_task(self) -> Dict[str, int]:
    """
    Email every patient about the onboarding forms they still owe.

    Individual delivery failures are counted, not retried; the next daily
    run picks the patient up again.
    """
    try:
        result = build_reminder_service().send_reminders()
    except Exception as exc:
        logger.error(
            f"Form reminder sweep failed: {exc}",
            extra={"task_id": self.request.id, "error_type": type(exc).__name__},
            exc_info=True,
        )
        _record_task_metrics(self.name, success=False)
        raise

    logger.info("Form reminder sweep finished", extra={"task_id": self.request.id, **result})
    _record_task_metrics(self.name, success=True)
    return result
