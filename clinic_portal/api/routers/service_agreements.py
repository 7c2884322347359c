"""
Service agreements router.

Architecture:
    HTTP Request → Router (this file) → ServiceAgreementService
                                            ├── ServiceAgreementRepository
                                            ├── IntakeFormRepository
                                            └── ConsentService (activation)
"""
import logging

from fastapi import APIRouter, Depends

from schemas import (
    IdResponse,
    ServiceAgreementAdminUpdate,
    ServiceAgreementCreate,
    ServiceAgreementEnvelope,
    ServiceAgreementResponse,
    ServiceAgreementUpgrade,
)
from services import ServiceAgreementService
from core.auth import CurrentUser, get_current_user, require_owner_access, require_roles, verify_api_key
from core.dependencies import get_service_agreement_service

logger = logging.getLogger(__name__)

SUBMIT_ROLES = ("patient", "admin", "owner")

router = APIRouter(
    prefix="/api/v1/service-agreements",
    tags=["Service Agreements"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=IdResponse,
    status_code=201,
    summary="Submit a service agreement",
    description="Owners/admins create activated agreements; patients sign the agreement "
                "activated for them. Other roles are rejected."
)
async def submit_service_agreement(
    agreement: ServiceAgreementCreate,
    user: CurrentUser = Depends(
        require_roles(SUBMIT_ROLES, "Unauthorized - Only patients, admins and owners can submit service agreements")
    ),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    """
    - Money fields accept strings such as "$12,500.00"
    - A patient is always linked to their own profile
    """
    return IdResponse(id=service_agreement_service.submit(agreement, user))


@router.post(
    "/{agreement_id}/activate",
    response_model=ServiceAgreementEnvelope,
    summary="Activate a service agreement",
    description="Activate the agreement and the patient's ibogaine consent form. Owner or admin access required."
)
async def activate_service_agreement(
    agreement_id: str,
    _: CurrentUser = Depends(require_owner_access),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    agreement = service_agreement_service.activate(agreement_id)
    return ServiceAgreementEnvelope(data=ServiceAgreementResponse(**agreement))


@router.patch(
    "/{agreement_id}/admin-fields",
    response_model=ServiceAgreementEnvelope,
    summary="Edit admin fields of an agreement",
    description="Pricing, number of days and provider signature. Owner or admin access required."
)
async def update_service_agreement_admin_fields(
    agreement_id: str,
    changes: ServiceAgreementAdminUpdate,
    _: CurrentUser = Depends(require_owner_access),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    agreement = service_agreement_service.update_admin_fields(agreement_id, changes)
    return ServiceAgreementEnvelope(data=ServiceAgreementResponse(**agreement))


@router.patch(
    "/{agreement_id}/upgrade",
    response_model=ServiceAgreementEnvelope,
    summary="Upgrade an agreement",
    description="Change days, amounts and payment method without touching signatures. "
                "Owner or admin access required."
)
async def upgrade_service_agreement(
    agreement_id: str,
    changes: ServiceAgreementUpgrade,
    _: CurrentUser = Depends(require_owner_access),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    agreement = service_agreement_service.upgrade(agreement_id, changes)
    return ServiceAgreementEnvelope(data=ServiceAgreementResponse(**agreement))


@router.get(
    "/prefill",
    response_model=ServiceAgreementEnvelope,
    summary="Get my agreement for signing",
)
async def get_service_agreement_prefill(
    user: CurrentUser = Depends(get_current_user),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    """
    Raises:
    - 404 Not Found: No agreement has been created for you yet
    - 409 Conflict: Your agreement is not activated yet
    """
    return ServiceAgreementEnvelope(data=ServiceAgreementResponse(**service_agreement_service.get_prefill(user)))


@router.get(
    "/{agreement_id}",
    response_model=ServiceAgreementEnvelope,
    summary="Get a service agreement",
)
async def get_service_agreement(
    agreement_id: str,
    user: CurrentUser = Depends(get_current_user),
    service_agreement_service: ServiceAgreementService = Depends(get_service_agreement_service)
):
    agreement = service_agreement_service.get_for_patient(agreement_id, user)
    return ServiceAgreementEnvelope(data=ServiceAgreementResponse(**agreement))
