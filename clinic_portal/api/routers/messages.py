"""
Messaging router - conversations between portal users.

Only participants can read or post in a conversation; for anyone else
the conversation does not exist (404).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from schemas import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
    SuccessResponse,
    UnreadCountResponse,
)
from services import MessagingService
from services.messaging_service import DEFAULT_CONVERSATION_LIMIT, DEFAULT_MESSAGE_LIMIT
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_messaging_service

logger = logging.getLogger(__name__)

MAX_LIMIT = 100

router = APIRouter(
    prefix="/api/v1/messages",
    tags=["Messaging"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "/conversations",
    response_model=ConversationResponse,
    status_code=201,
    summary="Start a conversation",
    description="The caller is always a participant. A one-to-one conversation with the same "
                "person is reused instead of duplicated."
)
async def create_conversation(
    body: ConversationCreate,
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    return messaging_service.create_conversation(body, user.id)


@router.get(
    "/conversations",
    response_model=ConversationListResponse,
    summary="List my conversations",
)
async def list_conversations(
    limit: int = Query(DEFAULT_CONVERSATION_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    return ConversationListResponse(data=messaging_service.get_user_conversations(user.id, limit, offset))


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count my unread messages",
)
async def get_unread_count(
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    return UnreadCountResponse(count=messaging_service.get_unread_count(user.id))


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=MessageListResponse,
    summary="List messages",
    description="Oldest to newest within the page. Pass `before` (a created_at timestamp) to page back."
)
async def list_messages(
    conversation_id: str,
    limit: int = Query(DEFAULT_MESSAGE_LIMIT, ge=1, le=MAX_LIMIT),
    before: Optional[str] = Query(None, description="Only messages created before this timestamp"),
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    return MessageListResponse(data=messaging_service.list_messages(conversation_id, user.id, limit, before))


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
    summary="Send a message",
)
async def send_message(
    conversation_id: str,
    body: MessageCreate,
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    return messaging_service.send_message(conversation_id, body, user.id)


@router.post(
    "/conversations/{conversation_id}/read",
    response_model=SuccessResponse,
    summary="Mark a conversation as read",
)
async def mark_conversation_read(
    conversation_id: str,
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    messaging_service.mark_as_read(conversation_id, user.id)
    return SuccessResponse()


@router.delete(
    "/{message_id}",
    response_model=SuccessResponse,
    summary="Delete a message",
    description="Soft delete. Only the sender may delete a message."
)
async def delete_message(
    message_id: str,
    user: CurrentUser = Depends(get_current_user),
    messaging_service: MessagingService = Depends(get_messaging_service)
):
    messaging_service.delete_message(message_id, user.id)
    return SuccessResponse()
