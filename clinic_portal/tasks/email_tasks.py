"""
Celery task for email delivery.

Note: Celery tasks run outside the FastAPI request context, so they cannot
use FastAPI's Depends() mechanism. Instead, they create service instances
directly using the DI helper functions from core.dependencies.

Observability:
    - Task success/failure metrics are recorded via MetricsCollector
    - Task IDs are logged for traceability
"""
import logging
from typing import Any, Dict

from celery import shared_task

from core.dependencies import get_email_service

logger = logging.getLogger(__name__)

DEFAULT_RETRY_BASE_DELAY = 2  # seconds
MAX_RETRIES = 3
# Bad input won't be fixed by retrying
NON_RETRYABLE_ERRORS = (ValueError,)


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


def _calculate_retry_delay(retry_count: int, base_delay: int = DEFAULT_RETRY_BASE_DELAY) -> int:
    """
    Exponential backoff delay for retries (1s, 2s, 4s with the default base).
    """
    return base_delay ** retry_count


@shared_task(bind=True, max_retries=MAX_RETRIES)
def send_email_task(self, to: str, subject: str, html: str) -> Dict[str, Any]:
    """
    Deliver one email through the Gmail API.

    Raises:
        ValueError: If the recipient is empty (non-retryable).
        Retry: If delivery fails, up to MAX_RETRIES times with exponential backoff.
    """
    try:
        if not to:
            raise ValueError("Email recipient is required")

        message_id = get_email_service().send(to=to, subject=subject, html=html)
        logger.info(
            "Email delivered",
            extra={"task_id": self.request.id, "recipient": to, "message_id": message_id}
        )
        _record_task_metrics(self.name, success=True)
        return {"status": "sent", "to": to, "message_id": message_id}

    except NON_RETRYABLE_ERRORS as exc:
        logger.error(
            f"Non-retryable error sending email: {exc}",
            extra={"task_id": self.request.id, "recipient": to, "error_type": type(exc).__name__}
        )
        _record_task_metrics(self.name, success=False)
        raise

    except Exception as exc:
        if self.request.retries >= MAX_RETRIES:
            logger.error(
                f"Max retries exhausted sending email to {to}: {exc}",
                extra={"task_id": self.request.id, "retries": self.request.retries}
            )
            _record_task_metrics(self.name, success=False)
        else:
            logger.warning(
                f"Retrying email to {to}: {exc}",
                extra={"task_id": self.request.id, "retry_count": self.request.retries + 1}
            )
        raise self.retry(exc=exc, countdown=_calculate_retry_delay(self.request.retries))
