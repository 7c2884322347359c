"""
Pydantic schemas for lead tasks, lead notes and user notifications.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from schemas.common import optional_uuid

LeadTaskStatus = Literal["todo", "in_progress", "done"]


class LeadTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, example="Call to confirm arrival date")
    description: Optional[str] = Field(None, max_length=2000)
    status: LeadTaskStatus = "todo"
    due_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    assigned_to_id: Optional[str] = Field(None, description="Staff profile id")

    @field_validator("assigned_to_id", mode="before")
    @classmethod
    def validate_assignee(cls, value):
        return optional_uuid(value)


class LeadTaskUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[LeadTaskStatus] = None
    due_date: Optional[str] = None
    assigned_to_id: Optional[str] = None

    @field_validator("title", "status")
    @classmethod
    def reject_null(cls, value):
        # Defaults are not validated, so this only fires on an explicit null
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("assigned_to_id", mode="before")
    @classmethod
    def validate_assignee(cls, value):
        return optional_uuid(value)


class LeadTaskStatusUpdate(BaseModel):
    status: LeadTaskStatus


class LeadTaskResponse(BaseModel):
    id: str
    lead_id: str
    title: str
    description: Optional[str] = None
    status: LeadTaskStatus
    due_date: Optional[str] = None
    assigned_to_id: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_by_id: str
    created_by_name: Optional[str] = None
    created_at: str
    updated_at: str


class LeadTaskListResponse(BaseModel):
    success: bool = True
    data: List[LeadTaskResponse]


class LeadNotesUpdate(BaseModel):
    notes: str = Field(..., max_length=20000)


class LeadNotesResponse(BaseModel):
    success: bool = True
    lead_id: str
    notes: str = Field("", description="Empty when no notes were saved yet")
    updated_by: Optional[str] = None
    updated_at: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    body: Optional[str] = None
    link: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    read_at: Optional[str] = None
    created_at: str


class NotificationListResponse(BaseModel):
    success: bool = True
    data: List[NotificationResponse]
