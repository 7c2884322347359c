"""
Form emails router - staff re-send onboarding form links.

Architecture:
    HTTP Request → Router (this file) → FormEmailService → partial intake,
                                                           intake and profile repositories
"""
import logging

from fastapi import APIRouter, Depends

from schemas import FormEmailRequest, FormEmailSent
from services import FormEmailService
from core.auth import require_staff, verify_api_key
from core.dependencies import get_form_email_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/form-emails",
    tags=["Form Emails"],
    dependencies=[Depends(verify_api_key), Depends(require_staff)],
)


@router.post(
    "",
    response_model=FormEmailSent,
    summary="Send a form link",
    description="Email the link to an onboarding form. It goes to the filler when the intake "
                "was filled in by someone else, otherwise to the patient."
)
async def send_form_email(
    request: FormEmailRequest,
    form_email_service: FormEmailService = Depends(get_form_email_service)
):
    """
    Raises:
    - 400 Bad Request: No recipient found, or an intake link without a partial form
    - 404 Not Found: The partial form does not exist
    - 502 Bad Gateway: The email could not be delivered
    """
    return form_email_service.send_form_email(request)
