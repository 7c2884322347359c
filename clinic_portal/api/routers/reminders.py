"""
Reminders router - run the onboarding form reminder sweep on demand.

The same sweep runs daily from Celery beat (tasks/reminder_tasks.py).
"""
import logging

from fastapi import APIRouter, Depends

from schemas import ReminderRunResult
from services import ReminderService
from core.auth import require_owner_access, verify_api_key
from core.dependencies import get_reminder_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/reminders",
    tags=["Reminders"],
    dependencies=[Depends(verify_api_key), Depends(require_owner_access)],
)


@router.post(
    "/run",
    response_model=ReminderRunResult,
    summary="Send form reminders now",
    description="Email every patient about missing onboarding forms. Runs synchronously and "
                "returns how many patients were checked and emails sent or failed."
)
async def run_form_reminders(
    reminder_service: ReminderService = Depends(get_reminder_service)
):
    return ReminderRunResult(**reminder_service.send_reminders())
