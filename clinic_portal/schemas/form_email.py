"""
Pydantic schemas for re-sending onboarding form links.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from schemas.common import optional_uuid

FormType = Literal["intake", "medical", "service", "ibogaine"]


class FormEmailRequest(BaseModel):
    """
    Which form link to send and who it concerns.

    The recipient is resolved from the partial form first, then the intake
    form, then the patient profile.
    """
    form_type: FormType
    patient_id: Optional[str] = None
    intake_form_id: Optional[str] = None
    partial_form_id: Optional[str] = Field(None, description="Required for the intake form")

    @field_validator("patient_id", "intake_form_id", "partial_form_id", mode="before")
    @classmethod
    def validate_ids(cls, value):
        return optional_uuid(value)


class FormEmailSent(BaseModel):
    success: bool = True
    message: str
    recipient_email: str
