"""
Partial intake router - pre-filled intake invitations.

An owner/admin starts an intake on the patient's behalf; the patient (or
the person filling in for them) receives an emailed link carrying a token
and completes the form from there.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import PartialIntakeCreate, PartialIntakeCreated, PartialIntakeResponse
from services import PartialIntakeService
from core.auth import CurrentUser, require_owner_access, verify_api_key
from core.dependencies import get_partial_intake_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/partial-intake-forms",
    tags=["Partial Intake"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=PartialIntakeCreated,
    status_code=201,
    summary="Create a partial intake form",
    description="Store a minimal or pre-filled intake and email the completion link. "
                "An email failure is reported as email_sent=false, not as an error."
)
async def create_partial_intake(
    form: PartialIntakeCreate,
    user: CurrentUser = Depends(require_owner_access),
    partial_intake_service: PartialIntakeService = Depends(get_partial_intake_service)
):
    """
    - **mode**: 'minimal' (name and email) or 'partial' (adds contact, address and program)
    """
    return partial_intake_service.create(form, created_by=user.id)


@router.get(
    "/token/{token}",
    response_model=PartialIntakeResponse,
    summary="Open a partial intake form by token",
    description="Public. Returns the stored fields used to pre-fill the intake form."
)
async def get_partial_intake_by_token(
    token: str,
    partial_intake_service: PartialIntakeService = Depends(get_partial_intake_service)
):
    """
    Raises:
    - 404 Not Found: Unknown token
    - 410 Gone: The link has expired
    - 409 Conflict: The form was already completed
    """
    return partial_intake_service.get_by_token(token)
