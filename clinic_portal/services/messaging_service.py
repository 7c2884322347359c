"""
Service layer for chat.

Chat is plain request/response over persisted rows: clients poll
conversations and messages, and unread counts come from the last
message each participant marked read.
"""
import logging
from typing import Any, Dict, List, Optional

from repositories import MessagingRepository, ProfileRepository
from schemas.messaging import (
    ConversationCreate,
    ConversationResponse,
    MessageCreate,
    MessageResponse,
    Participant,
    ParticipantUser,
)
from core.exceptions import ConversationNotFoundError, NotFoundError, PermissionDeniedError, ValidationFailedError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 50
DEFAULT_CONVERSATION_LIMIT = 50
PREVIEW_LENGTH = 100

MEDIA_LABELS = {"image": "Image", "audio": "Voice message", "file": "File"}


def message_preview(content: Optional[str], message_type: str) -> str:
    """First 100 characters of the text, or a label for media without text."""
    text = (content or "").strip()
    if text:
        return text[:PREVIEW_LENGTH]
    return MEDIA_LABELS.get(message_type, "")


class MessagingService:
    """Conversations, participants and messages for the acting user."""

    def __init__(self, messaging_repository: MessagingRepository, profile_repository: ProfileRepository):
        self._repo = messaging_repository
        self._profile_repo = profile_repository

    def _require_participant(self, conversation_id: str, user_id: str) -> None:
        if not self._repo.is_participant(conversation_id, user_id):
            raise ConversationNotFoundError(conversation_id=conversation_id)

    def _with_participants(self, conversations: List[Dict[str, Any]]) -> List[ConversationResponse]:
        grouped: Dict[str, List[Participant]] = {c["id"]: [] for c in conversations}
        for row in self._repo.list_participants(grouped.keys()):
            user = None
            if any(row.get(k) is not None for k in ("first_name", "last_name", "email", "role")):
                user = ParticipantUser(
                    id=row["user_id"],
                    first_name=row.get("first_name"),
                    last_name=row.get("last_name"),
                    email=row.get("email"),
                    role=row.get("role"),
                    avatar_url=row.get("avatar_url"),
                    is_online=bool(row.get("is_online")),
                )
            grouped[row["conversation_id"]].append(Participant(
                user_id=row["user_id"],
                joined_at=row["joined_at"],
                last_read_at=row.get("last_read_at"),
                user=user,
            ))
        return [
            ConversationResponse(**c, participants=grouped[c["id"]])
            for c in conversations
        ]

    # -------------------------------------------------------------------------
    # Conversations
    # -------------------------------------------------------------------------

    def create_conversation(self, data: ConversationCreate, user_id: str) -> ConversationResponse:
        """
        Start a conversation. The creator is always a participant, and a
        one-to-one conversation between the same two people is reused.

        Raises:
            ValidationFailedError: A participant id names no profile.
        """
        participant_ids = list(dict.fromkeys([user_id] + [p for p in data.participant_ids if p]))
        found = self._profile_repo.get_many(participant_ids)
        missing = [p for p in participant_ids if p not in found]
        if missing:
            raise ValidationFailedError("Unknown participant", participant_ids=missing)
        if len(participant_ids) < 2:
            raise ValidationFailedError("A conversation needs at least one other participant")

        if not data.is_group and len(participant_ids) == 2:
            existing = self._repo.find_direct_conversation(participant_ids[0], participant_ids[1])
            if existing:
                logger.info(f"Reusing direct conversation {existing['id']}")
                return self._with_participants([existing])[0]

        conversation = self._repo.create_conversation(
            created_by=user_id,
            participant_ids=participant_ids,
            name=data.name,
            is_group=data.is_group,
        )
        logger.info(f"Conversation created (id={conversation['id']}, participants={len(participant_ids)})")
        return self._with_participants([conversation])[0]

    def get_user_conversations(
        self,
        user_id: str,
        limit: int = DEFAULT_CONVERSATION_LIMIT,
        offset: int = 0,
    ) -> List[ConversationResponse]:
        """The user's conversations, most recent activity first, with unread counts."""
        return self._with_participants(self._repo.list_user_conversations(user_id, limit, offset))

    def mark_as_read(self, conversation_id: str, user_id: str) -> None:
        self._require_participant(conversation_id, user_id)
        self._repo.mark_read(conversation_id, user_id)

    def get_unread_count(self, user_id: str) -> int:
        return self._repo.total_unread(user_id)

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    def send_message(self, conversation_id: str, data: MessageCreate, user_id: str) -> MessageResponse:
        """
        Raises:
            ConversationNotFoundError: The sender is not a participant.
            ValidationFailedError: `reply_to` names a message from another conversation.
        """
        self._require_participant(conversation_id, user_id)

        if data.reply_to:
            original = self._repo.get_message(data.reply_to)
            if original is None or original["conversation_id"] != conversation_id:
                raise ValidationFailedError("Reply target not found", reply_to=data.reply_to)

        message = self._repo.add_message(
            {
                "conversation_id": conversation_id,
                "sender_id": user_id,
                "content": data.content,
                "type": data.type,
                "media_url": data.media_url,
                "reply_to": data.reply_to,
            },
            preview=message_preview(data.content, data.type),
        )
        return MessageResponse(**message)

    def list_messages(
        self,
        conversation_id: str,
        user_id: str,
        limit: int = DEFAULT_MESSAGE_LIMIT,
        before: Optional[str] = None,
    ) -> List[MessageResponse]:
        """A page of messages, oldest to newest. `before` pages back in time."""
        self._require_participant(conversation_id, user_id)
        return [MessageResponse(**m) for m in self._repo.list_messages(conversation_id, limit, before)]

    def delete_message(self, message_id: str, user_id: str) -> None:
        """
        Soft-delete a message. Only its sender may delete it.

        Raises:
            NotFoundError: Unknown or already deleted message.
            PermissionDeniedError: The caller did not send the message.
        """
        message = self._repo.get_message(message_id)
        if message is None or message["is_deleted"]:
            raise NotFoundError("Message not found", message_id=message_id)
        if message["sender_id"] != user_id:
            raise PermissionDeniedError("You can only delete your own messages")
        self._repo.soft_delete_message(message_id)
        logger.info(f"Message deleted (id={message_id})")
