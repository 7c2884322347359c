"""
Leads router - staff tasks and notes attached to a pipeline lead.

A lead id is the id of a partial or public intake form. Assigning a task
to another staff member notifies them (see notifications router).
"""
import logging

from fastapi import APIRouter, Depends

from schemas import (
    LeadNotesResponse,
    LeadNotesUpdate,
    LeadTaskCreate,
    LeadTaskListResponse,
    LeadTaskResponse,
    LeadTaskStatusUpdate,
    LeadTaskUpdate,
    SuccessResponse,
)
from services import LeadService
from core.auth import CurrentUser, require_staff, verify_api_key
from core.dependencies import get_lead_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/leads",
    tags=["Leads"],
    dependencies=[Depends(verify_api_key)],
)


@router.get(
    "/{lead_id}/tasks",
    response_model=LeadTaskListResponse,
    summary="List a lead's tasks",
)
async def list_lead_tasks(
    lead_id: str,
    _: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return LeadTaskListResponse(data=lead_service.list_tasks(lead_id))


@router.post(
    "/{lead_id}/tasks",
    response_model=LeadTaskResponse,
    status_code=201,
    summary="Create a lead task",
)
async def create_lead_task(
    lead_id: str,
    task: LeadTaskCreate,
    user: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return lead_service.create_task(lead_id, task, actor_id=user.id)


@router.patch(
    "/tasks/{task_id}",
    response_model=LeadTaskResponse,
    summary="Update a lead task",
    description="Partial update; omitted fields are left unchanged."
)
async def update_lead_task(
    task_id: str,
    task: LeadTaskUpdate,
    user: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return lead_service.update_task(task_id, task, actor_id=user.id)


@router.patch(
    "/tasks/{task_id}/status",
    response_model=LeadTaskResponse,
    summary="Change a lead task's status",
)
async def update_lead_task_status(
    task_id: str,
    body: LeadTaskStatusUpdate,
    _: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return lead_service.update_status(task_id, body.status)


@router.delete(
    "/tasks/{task_id}",
    response_model=SuccessResponse,
    summary="Delete a lead task",
)
async def delete_lead_task(
    task_id: str,
    _: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    lead_service.delete_task(task_id)
    return SuccessResponse()


@router.get(
    "/{lead_id}/notes",
    response_model=LeadNotesResponse,
    summary="Get a lead's notes",
)
async def get_lead_notes(
    lead_id: str,
    _: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return lead_service.get_notes(lead_id)


@router.put(
    "/{lead_id}/notes",
    response_model=LeadNotesResponse,
    summary="Save a lead's notes",
)
async def save_lead_notes(
    lead_id: str,
    body: LeadNotesUpdate,
    user: CurrentUser = Depends(require_staff),
    lead_service: LeadService = Depends(get_lead_service)
):
    return lead_service.save_notes(lead_id, body.notes, actor_id=user.id)
