"""
Ibogaine consent router.

Consent forms are normally created and activated when the patient's
service agreement is activated; the patient then signs them here.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import ConsentAdminUpdate, ConsentFormCreate, ConsentFormEnvelope, ConsentFormResponse, IdResponse
from services import ConsentService
from core.auth import CurrentUser, get_current_user, require_owner_access, verify_api_key
from core.dependencies import get_consent_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/ibogaine-consent-forms",
    tags=["Ibogaine Consent"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=IdResponse,
    status_code=201,
    summary="Submit an ibogaine consent form",
    description="Public. Signs the patient's activated form, or stores a new activated form. "
                "All seven consent sections must be acknowledged."
)
async def submit_consent(
    form: ConsentFormCreate,
    consent_service: ConsentService = Depends(get_consent_service)
):
    return IdResponse(id=consent_service.submit(form))


@router.get(
    "/{form_id}",
    response_model=ConsentFormEnvelope,
    summary="Get an ibogaine consent form",
)
async def get_consent(
    form_id: str,
    user: CurrentUser = Depends(get_current_user),
    consent_service: ConsentService = Depends(get_consent_service)
):
    return ConsentFormEnvelope(data=ConsentFormResponse(**consent_service.get_for_patient(form_id, user)))


@router.patch(
    "/{form_id}/admin-fields",
    response_model=ConsentFormEnvelope,
    summary="Edit admin fields of a consent form",
    description="Date of birth, address and, optionally, the facilitator. Owner or admin access required."
)
async def update_consent_admin_fields(
    form_id: str,
    changes: ConsentAdminUpdate,
    _: CurrentUser = Depends(require_owner_access),
    consent_service: ConsentService = Depends(get_consent_service)
):
    return ConsentFormEnvelope(data=ConsentFormResponse(**consent_service.update_admin_fields(form_id, changes)))
