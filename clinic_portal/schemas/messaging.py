"""
Pydantic schemas for chat conversations and messages.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MessageType = Literal["text", "image", "audio", "file"]


class ConversationCreate(BaseModel):
    participant_ids: List[str] = Field(..., min_length=1, description="Other participants; the creator is added")
    name: Optional[str] = Field(None, max_length=200)
    is_group: bool = False


class MessageCreate(BaseModel):
    content: Optional[str] = Field(None, max_length=10000)
    type: MessageType = "text"
    media_url: Optional[str] = Field(None, max_length=1000)
    reply_to: Optional[str] = None

    @field_validator("reply_to", mode="before")
    @classmethod
    def empty_reply_to(cls, value):
        return value or None

    @model_validator(mode="after")
    def validate_body(self):
        if self.type == "text" and not (self.content and self.content.strip()):
            raise ValueError("content: Message cannot be empty")
        if self.type != "text" and not self.media_url and not (self.content and self.content.strip()):
            raise ValueError("media_url: Media messages need a media_url")
        return self


class ParticipantUser(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    avatar_url: Optional[str] = None
    is_online: bool = False


class Participant(BaseModel):
    user_id: str
    joined_at: str
    last_read_at: Optional[str] = None
    user: Optional[ParticipantUser] = None


class ConversationResponse(BaseModel):
    id: str
    name: Optional[str] = None
    is_group: bool
    last_message_at: Optional[str] = None
    last_message_preview: Optional[str] = None
    created_by: Optional[str] = None
    created_at: str
    updated_at: str
    participants: List[Participant] = []
    unread_count: int = 0


class ConversationListResponse(BaseModel):
    success: bool = True
    data: List[ConversationResponse]


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: Optional[str] = None
    type: MessageType
    media_url: Optional[str] = None
    reply_to: Optional[str] = None
    is_deleted: bool
    created_at: str
    updated_at: str


class MessageListResponse(BaseModel):
    success: bool = True
    data: List[MessageResponse]


class UnreadCountResponse(BaseModel):
    success: bool = True
    count: int
