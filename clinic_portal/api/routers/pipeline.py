"""
Pipeline router - admin view of prospective patients.

Architecture:
    HTTP Request → Router (this file) → PipelineService → intake, medical history,
                                                          agreement and consent repositories
"""
import logging

from fastapi import APIRouter, Depends, Query

from schemas import PartialFormsResponse, PipelineSummaryResponse, PublicIntakeFormsResponse
from services import PipelineService
from services.pipeline_service import DEFAULT_LIMIT, MAX_LIMIT
from core.auth import require_owner_access, verify_api_key
from core.dependencies import get_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/pipeline",
    tags=["Patient Pipeline"],
    dependencies=[Depends(verify_api_key), Depends(require_owner_access)],
)


@router.get(
    "/partial-forms",
    response_model=PartialFormsResponse,
    summary="List partial intake forms",
    description="Partial forms newest first, with their creator and onboarding form completion."
)
async def list_partial_forms(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Maximum number of forms to return"),
    pipeline_service: PipelineService = Depends(get_pipeline_service)
):
    return PartialFormsResponse(data=pipeline_service.list_partial_forms(limit))


@router.get(
    "/public-forms",
    response_model=PublicIntakeFormsResponse,
    summary="List public intake forms",
    description="Intake forms submitted directly from the public site (not through a partial form)."
)
async def list_public_forms(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Maximum number of forms to return"),
    pipeline_service: PipelineService = Depends(get_pipeline_service)
):
    return PublicIntakeFormsResponse(data=pipeline_service.list_public_intake_forms(limit))


@router.get(
    "/summary",
    response_model=PipelineSummaryResponse,
    summary="Pipeline counts",
)
async def get_pipeline_summary(
    pipeline_service: PipelineService = Depends(get_pipeline_service)
):
    return PipelineSummaryResponse(data=pipeline_service.get_summary())
