"""
Pydantic schemas for partial (staff-initiated) intake forms.

Staff start an intake on a patient's behalf and email a tokenized link.
`mode` selects how much is pre-filled:
    minimal - names and email only
    partial - contact, address, emergency contact and program pre-filled
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from core.validators import check_email, check_optional_email, check_optional_phone, check_us_zip
from schemas.common import FillerFields, ProgramType
from schemas.intake import Gender


class _PartialIntakeBase(FillerFields):
    first_name: str = Field(..., min_length=1, max_length=100, example="Jane")
    last_name: str = Field(..., min_length=1, max_length=100, example="Doe")
    email: str = Field(..., max_length=255, example="jane@example.com")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)


class MinimalPartialIntakeCreate(_PartialIntakeBase):
    """Invite with only the patient's name and email."""
    mode: Literal["minimal"]


class PrefilledPartialIntakeCreate(_PartialIntakeBase):
    """Invite with contact, address and emergency contact details pre-filled."""
    mode: Literal["partial"]
    phone_number: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[str] = Field(None, description="YYYY-MM-DD")
    gender: Optional[Gender] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=10, description="US ZIP, 12345 or 12345-6789")
    emergency_contact_first_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_last_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_email: Optional[str] = Field(None, max_length=255)
    emergency_contact_phone: Optional[str] = Field(None, max_length=50)
    emergency_contact_address: Optional[str] = Field(None, max_length=255)
    emergency_contact_relationship: Optional[str] = Field(None, max_length=100)
    program_type: Optional[ProgramType] = None

    @field_validator("phone_number", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        return check_optional_phone(value)

    @field_validator("emergency_contact_email")
    @classmethod
    def validate_emergency_email(cls, value: Optional[str]) -> Optional[str]:
        return check_optional_email(value)

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, value: Optional[str]) -> Optional[str]:
        return check_us_zip(value)


PartialIntakeCreate = Annotated[
    Union[MinimalPartialIntakeCreate, PrefilledPartialIntakeCreate],
    Field(discriminator="mode"),
]


class PartialIntakeCreated(BaseModel):
    """Result of creating a partial intake form."""
    success: bool = True
    id: str
    token: str
    form_link: str = Field(..., example="https://iboga.app/intake?token=...")
    email_sent: bool = Field(..., description="False when the invitation email could not be delivered")


class PartialIntakeResponse(FillerFields):
    """Stored partial intake form, as opened from the emailed link."""
    id: str
    token: str
    mode: Literal["minimal", "partial"]
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    emergency_contact_first_name: Optional[str] = None
    emergency_contact_last_name: Optional[str] = None
    emergency_contact_email: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_address: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    program_type: Optional[str] = None
    recipient_email: str
    recipient_name: Optional[str] = None
    created_by: Optional[str] = None
    email_sent_at: Optional[str] = None
    expires_at: str
    completed_at: Optional[str] = None
    completed_form_id: Optional[str] = None
    created_at: str


class CreatorSummary(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class FormCompletion(BaseModel):
    """How many of the four onboarding forms a prospect has completed."""
    completed: int = Field(..., ge=0, le=4)
    total: int = 4


class PartialIntakeListItem(PartialIntakeResponse):
    creator: Optional[CreatorSummary] = None
    form_completion: Optional[FormCompletion] = None


class PartialIntakeListResponse(BaseModel):
    success: bool = True
    data: List[PartialIntakeListItem]
