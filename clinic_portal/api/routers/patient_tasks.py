"""
Patient tasks router - onboarding task cards for the signed-in patient.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import PatientTasksResponse
from services import PatientTaskService
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_patient_task_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/patient-tasks",
    tags=["Patient Tasks"],
    dependencies=[Depends(verify_api_key)],
)


@router.get(
    "",
    response_model=PatientTasksResponse,
    summary="Get my onboarding tasks",
    description="Application, medical history, service agreement and ibogaine consent, "
                "each marked completed or not started."
)
async def get_patient_tasks(
    user: CurrentUser = Depends(get_current_user),
    patient_task_service: PatientTaskService = Depends(get_patient_task_service)
):
    return patient_task_service.get_patient_tasks(user)
