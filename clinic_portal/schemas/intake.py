"""
Pydantic schemas for the public patient intake (application) form.
"""
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from core.validators import check_email, check_optional_email, check_phone
from schemas.common import FillerFields, ProgramType, optional_uuid

Gender = Literal["male", "female", "other", "prefer-not-to-say"]


class PatientIntakeCreate(FillerFields):
    """Schema for a submitted patient intake form.

    Submitted anonymously from the public site. When the form completes a
    staff-initiated partial intake, `partial_form_id` links the two.
    """
    program_type: ProgramType = Field(..., description="Program the patient is applying for")

    first_name: str = Field(..., min_length=1, max_length=100, example="Jane")
    last_name: str = Field(..., min_length=1, max_length=100, example="Doe")
    email: str = Field(..., max_length=255, example="jane@example.com")
    phone_number: str = Field(..., max_length=50, example="(555) 123-4567")
    date_of_birth: Optional[str] = Field(None, description="YYYY-MM-DD", example="1985-04-12")
    gender: Optional[Gender] = None

    address_line_1: str = Field(..., min_length=1, max_length=255)
    address_line_2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)

    emergency_contact_first_name: str = Field(..., min_length=1, max_length=100)
    emergency_contact_last_name: str = Field(..., min_length=1, max_length=100)
    emergency_contact_email: Optional[str] = Field(None, max_length=255, description="May be empty")
    emergency_contact_phone: str = Field(..., max_length=50)
    emergency_contact_address: Optional[str] = Field(None, max_length=255)
    emergency_contact_relationship: Optional[str] = Field(None, max_length=100)

    privacy_policy_accepted: bool = Field(..., description="Must be true")
    partial_form_id: Optional[str] = Field(None, description="Partial intake form this submission completes")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("phone_number", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return check_phone(value)

    @field_validator("emergency_contact_email")
    @classmethod
    def validate_emergency_email(cls, value: Optional[str]) -> Optional[str]:
        return check_optional_email(value)

    @field_validator("partial_form_id", mode="before")
    @classmethod
    def validate_partial_form_id(cls, value):
        return optional_uuid(value)

    @model_validator(mode="after")
    def validate_privacy_policy(self):
        if not self.privacy_policy_accepted:
            raise ValueError("privacy_policy_accepted: You must accept the privacy policy")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "filled_by": "self",
                "program_type": "mental_health",
                "first_name": "Jane",
                "last_name": "Doe",
                "email": "jane@example.com",
                "phone_number": "(555) 123-4567",
                "address_line_1": "12 Palm Street",
                "city": "Austin",
                "state": "TX",
                "zip_code": "73301",
                "country": "United States",
                "emergency_contact_first_name": "John",
                "emergency_contact_last_name": "Doe",
                "emergency_contact_phone": "(555) 765-4321",
                "privacy_policy_accepted": True,
            }
        }


class PatientIntakeResponse(FillerFields):
    """Stored intake form."""
    id: str
    program_type: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    emergency_contact_first_name: Optional[str] = None
    emergency_contact_last_name: Optional[str] = None
    emergency_contact_email: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_address: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    privacy_policy_accepted: bool
    created_at: str
    updated_at: str
