"""
Pydantic schemas for the ibogaine therapy consent form.
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from core.validators import check_email, check_phone
from schemas.common import OptionalIntakeLink, calendar_date, optional_uuid


class ConsentFormCreate(OptionalIntakeLink):
    """
    Schema for a signed consent form. All seven consent sections must be
    acknowledged.
    """
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: str = Field(..., min_length=1)
    phone_number: str = Field(..., max_length=50)
    email: str = Field(..., max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    treatment_date: str = Field(..., min_length=1)
    facilitator_doctor_name: str = Field(..., min_length=1, max_length=200)

    consent_for_treatment: bool
    risks_and_benefits: bool
    pre_screening_health_assessment: bool
    voluntary_participation: bool
    confidentiality: bool
    liability_release: bool
    payment_collection: bool

    signature_data: str = Field(..., min_length=1)
    signature_date: str = Field(..., min_length=1)
    signature_name: str = Field(..., min_length=1, max_length=200)

    patient_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return check_phone(value)

    @field_validator("patient_id", mode="before")
    @classmethod
    def validate_patient_id(cls, value):
        return optional_uuid(value)

    @model_validator(mode="after")
    def validate_consents(self):
        missing = [
            name for name in (
                "consent_for_treatment",
                "risks_and_benefits",
                "pre_screening_health_assessment",
                "voluntary_participation",
                "confidentiality",
                "liability_release",
                "payment_collection",
            )
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"{missing[0]}: You must acknowledge every consent section")
        return self


class ConsentAdminUpdate(BaseModel):
    """Fields an owner/admin completes on a consent form."""
    date_of_birth: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=500)
    facilitator_doctor_name: Optional[str] = Field(
        None, min_length=1, max_length=200, description="Overrides the clinic default when given"
    )

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, value: str) -> str:
        return calendar_date(value)


class ConsentFormResponse(BaseModel):
    """Stored consent form; every stored column is passed through."""
    id: str
    patient_id: Optional[str] = None
    intake_form_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    facilitator_doctor_name: Optional[str] = None
    is_activated: bool
    created_at: str
    updated_at: str

    class Config:
        extra = "allow"


class ConsentFormEnvelope(BaseModel):
    success: bool = True
    data: ConsentFormResponse
