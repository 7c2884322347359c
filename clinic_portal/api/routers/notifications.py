"""
Notifications router - the signed-in user's notifications.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import NotificationListResponse, SuccessResponse
from services import NotificationService
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/notifications",
    tags=["Notifications"],
    dependencies=[Depends(verify_api_key)],
)


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
    description="The latest 50, newest first."
)
async def list_notifications(
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    return NotificationListResponse(data=notification_service.list_mine(user.id))


@router.post(
    "/{notification_id}/read",
    response_model=SuccessResponse,
    summary="Mark a notification as read",
)
async def mark_notification_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    notification_service.mark_read(notification_id, user.id)
    return SuccessResponse()
