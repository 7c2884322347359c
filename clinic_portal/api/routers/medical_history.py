"""
Medical history router - medical health history forms.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import IdResponse, MedicalHistoryCreate, MedicalHistoryResponse
from services import MedicalHistoryService
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_medical_history_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/medical-history-forms",
    tags=["Medical History"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=IdResponse,
    status_code=201,
    summary="Submit a medical history form",
    description="Public submission. Queues a confirmation to the patient and, when the linked "
                "intake was filled in by someone else, to that person too."
)
async def submit_medical_history(
    form: MedicalHistoryCreate,
    medical_history_service: MedicalHistoryService = Depends(get_medical_history_service)
):
    return IdResponse(id=medical_history_service.submit(form))


@router.get(
    "/{form_id}",
    response_model=MedicalHistoryResponse,
    summary="Get a medical history form",
    description="Owners and admins may view any form; other users only their own."
)
async def get_medical_history(
    form_id: str,
    user: CurrentUser = Depends(get_current_user),
    medical_history_service: MedicalHistoryService = Depends(get_medical_history_service)
):
    return medical_history_service.get_for_patient(form_id, user)
