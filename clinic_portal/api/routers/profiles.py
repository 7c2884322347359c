"""
Profiles router - portal user profiles.

Architecture:
    HTTP Request → Router (this file) → ProfileService → ProfileRepository → Database

All endpoints require API key authentication and an acting user (X-User-Id).
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from schemas import AvatarUpdate, PatientSearchResponse, ProfileCreate, ProfileResponse, ProfileUpdate, StaffMember
from services import ProfileService
from core.auth import CurrentUser, get_current_user, require_owner_access, require_staff, verify_api_key
from core.dependencies import get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/profiles",
    tags=["Profiles"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=201,
    summary="Create a profile",
    description="Create a portal user. Owner or admin access required. Emails are unique."
)
async def create_profile(
    profile: ProfileCreate,
    _: CurrentUser = Depends(require_owner_access),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """
    Raises:
    - 409 Conflict: A profile with this email already exists
    """
    return profile_service.create_profile(profile)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get my profile",
)
async def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    return profile_service.get_profile(user.id)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update my profile",
    description="Change your own name, phone, designation or avatar. Only the fields sent are changed."
)
async def update_my_profile(
    changes: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    return profile_service.update_profile(user.id, changes)


@router.put(
    "/me/avatar",
    response_model=ProfileResponse,
    summary="Set my avatar",
)
async def update_my_avatar(
    avatar: AvatarUpdate,
    user: CurrentUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    return profile_service.update_avatar(user.id, avatar)


@router.get(
    "/staff",
    response_model=List[StaffMember],
    summary="List staff for task assignment",
    description="Staff-role profiles ordered by first name. Staff access required."
)
async def list_staff(
    _: CurrentUser = Depends(require_staff),
    profile_service: ProfileService = Depends(get_profile_service)
):
    return profile_service.list_staff_for_assign()


@router.get(
    "/patients/search",
    response_model=PatientSearchResponse,
    summary="Search patients",
    description="Patients whose name or email contains the query, at most 10. "
                "Queries shorter than two characters return no results. Staff access required."
)
async def search_patients(
    q: str = Query(..., min_length=1, max_length=200, description="Part of a name or email"),
    _: CurrentUser = Depends(require_staff),
    profile_service: ProfileService = Depends(get_profile_service)
):
    return PatientSearchResponse(data=profile_service.search_patients(q))
