"""
Shared response shapes and field mixins.
"""
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from core.datetime_utils import parse_datetime
from core.validators import check_filler_details

FilledBy = Literal["self", "someone_else"]
ProgramType = Literal["neurological", "mental_health", "addiction"]


class SuccessResponse(BaseModel):
    """Acknowledgement for operations that return no entity."""
    success: bool = Field(True, description="Always true; errors use the error envelope")


class IdResponse(SuccessResponse):
    """Acknowledgement carrying the id of the created or updated row."""
    id: str = Field(..., description="Row id", example="3f0e2c1a-8b6d-4d7e-9f55-0c2a1b3d4e5f")


class FillerFields(BaseModel):
    """
    Who is filling the form in. When someone else fills it in for the
    patient, all filler fields become required.
    """
    filled_by: FilledBy = Field("self", description="'self' or 'someone_else'")
    filler_relationship: Optional[str] = Field(None, max_length=100)
    filler_first_name: Optional[str] = Field(None, max_length=100)
    filler_last_name: Optional[str] = Field(None, max_length=100)
    filler_email: Optional[str] = Field(None, max_length=255)
    filler_phone: Optional[str] = Field(None, max_length=50)

    @model_validator(mode="after")
    def validate_filler(self):
        check_filler_details(
            self.filled_by,
            self.filler_relationship,
            self.filler_first_name,
            self.filler_last_name,
            self.filler_email,
            self.filler_phone,
        )
        return self


def optional_uuid(value: Optional[str]) -> Optional[str]:
    """Accept a UUID string, '' or None; '' becomes None."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    try:
        return str(UUID(str(value)))
    except ValueError:
        raise ValueError("Must be a valid UUID")


def calendar_date(value: str) -> str:
    """Normalize a date string to YYYY-MM-DD."""
    try:
        return parse_datetime(value).date().isoformat()
    except ValueError:
        raise ValueError("Must be a valid date")


class OptionalIntakeLink(BaseModel):
    """Mixin for forms that may point back at a patient intake form."""
    intake_form_id: Optional[str] = Field(None, description="Linked intake form id (UUID) or empty")

    @field_validator("intake_form_id", mode="before")
    @classmethod
    def validate_intake_form_id(cls, value):
        return optional_uuid(value)
