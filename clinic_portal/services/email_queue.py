"""
Hands outgoing email to the Celery delivery task.
"""
import logging
from typing import Optional

from services.email_templates import EmailContent
from tasks.email_tasks import send_email_task
from core.middleware import get_metrics_collector

logger = logging.getLogger(__name__)


class EmailQueue:
    """Queues confirmation and invitation emails for background delivery."""

    def enqueue(self, to: str, content: EmailContent) -> Optional[str]:
        """
        Queue one email.

        Returns:
            The Celery task id, or None if the broker could not be reached.
            Queueing failures are logged and never fail the calling request.
        """
        try:
            result = send_email_task.delay(to=to, subject=content.subject, html=content.html)
        except Exception as e:
            logger.error(f"Failed to queue email: {e}", extra={"recipient": to}, exc_info=True)
            get_metrics_collector().record_email("queue_failed")
            return None

        logger.info("Queued email", extra={"recipient": to, "task_id": result.id})
        get_metrics_collector().record_email("queued")
        return result.id
