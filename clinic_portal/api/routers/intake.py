"""
Intake router - patient application (intake) forms.

Submission is public: the form is linked from the clinic website and
may be filled in before the patient has a portal account. The client
address and user agent are stored with the form for audit.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from schemas import IdResponse, PatientIntakeCreate, PatientIntakeResponse
from services import IntakeService
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_intake_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/intake-forms",
    tags=["Patient Intake"],
    dependencies=[Depends(verify_api_key)],
)


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, else X-Real-IP, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


@router.post(
    "",
    response_model=IdResponse,
    status_code=201,
    summary="Submit an intake form",
    description="Public submission of the patient application. Queues a confirmation email."
)
async def submit_intake(
    form: PatientIntakeCreate,
    request: Request,
    intake_service: IntakeService = Depends(get_intake_service)
):
    """
    - **filled_by**: 'self' or 'someone_else'; filler details are required for the latter
    - **privacy_policy_accepted**: must be true
    - **partial_form_id**: id of the partial form this submission completes (optional)
    """
    form_id = intake_service.submit(
        form,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return IdResponse(id=form_id)


@router.get(
    "/{form_id}",
    response_model=PatientIntakeResponse,
    summary="Get an intake form",
    description="Staff may view any form; patients only forms submitted with their email."
)
async def get_intake(
    form_id: str,
    user: CurrentUser = Depends(get_current_user),
    intake_service: IntakeService = Depends(get_intake_service)
):
    return intake_service.get_form(form_id, user)
