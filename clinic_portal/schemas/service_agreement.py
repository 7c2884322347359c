"""
Pydantic schemas for service agreements.

Money fields arrive as user-entered strings ("$12,500.00") and are parsed
to floats before range checks run.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from core.validators import check_email, check_phone, parse_money
from schemas.common import OptionalIntakeLink, ProgramType, calendar_date, optional_uuid

MONEY_FIELDS = ("total_program_fee", "deposit_amount", "deposit_percentage", "remaining_balance")


def _money(value):
    amount = parse_money(value)
    if amount is None:
        raise ValueError("Please enter a valid amount")
    return amount


class ServiceAgreementCreate(OptionalIntakeLink):
    """Schema for a submitted (or re-signed) service agreement."""
    patient_first_name: str = Field(..., min_length=1, max_length=100)
    patient_last_name: str = Field(..., min_length=1, max_length=100)
    patient_email: str = Field(..., max_length=255)
    patient_phone_number: str = Field(..., max_length=50)

    total_program_fee: float = Field(..., gt=0, description="Parsed from a money string", example="$12,500.00")
    deposit_amount: float = Field(..., gt=0, example="$5,000")
    deposit_percentage: float = Field(..., ge=0, le=100, example="40")
    remaining_balance: float = Field(..., ge=0, example="$7,500")
    payment_method: str = Field(..., min_length=1, max_length=100)

    patient_signature_name: str = Field(..., min_length=1, max_length=200)
    patient_signature_first_name: str = Field(..., min_length=1, max_length=100)
    patient_signature_last_name: str = Field(..., min_length=1, max_length=100)
    patient_signature_date: str = Field(..., min_length=1)
    patient_signature_data: Optional[str] = None

    provider_signature_name: str = Field(..., min_length=1, max_length=200)
    provider_signature_first_name: str = Field(..., min_length=1, max_length=100)
    provider_signature_last_name: str = Field(..., min_length=1, max_length=100)
    provider_signature_date: str = Field(..., min_length=1)
    provider_signature_data: Optional[str] = None

    uploaded_file_url: Optional[str] = None
    uploaded_file_name: Optional[str] = None
    patient_id: Optional[str] = None
    program_type: Optional[ProgramType] = None
    number_of_days: Optional[int] = Field(None, gt=0)

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def validate_money(cls, value):
        return _money(value)

    @field_validator("patient_email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("patient_phone_number")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return check_phone(value)

    @field_validator("patient_id", mode="before")
    @classmethod
    def validate_patient_id(cls, value):
        return optional_uuid(value)

    @field_validator("program_type", mode="before")
    @classmethod
    def empty_program_type(cls, value):
        return value or None

    class Config:
        json_schema_extra = {
            "example": {
                "patient_first_name": "Jane",
                "patient_last_name": "Doe",
                "patient_email": "jane@example.com",
                "patient_phone_number": "(555) 123-4567",
                "total_program_fee": "$12,500.00",
                "deposit_amount": "$5,000.00",
                "deposit_percentage": "40",
                "remaining_balance": "$7,500.00",
                "payment_method": "wire transfer",
                "patient_signature_name": "Jane Doe",
                "patient_signature_first_name": "Jane",
                "patient_signature_last_name": "Doe",
                "patient_signature_date": "2025-03-01",
                "provider_signature_name": "Omar Calderon",
                "provider_signature_first_name": "Omar",
                "provider_signature_last_name": "Calderon",
                "provider_signature_date": "2025-03-01",
                "program_type": "addiction",
                "number_of_days": 14,
            }
        }


class ServiceAgreementAdminUpdate(BaseModel):
    """Fields an owner/admin completes on an agreement: pricing, length and provider signature."""
    total_program_fee: float = Field(..., gt=0)
    deposit_amount: float = Field(..., gt=0)
    deposit_percentage: float = Field(..., ge=0, le=100)
    remaining_balance: float = Field(..., ge=0)
    provider_signature_name: str = Field(..., min_length=1, max_length=200)
    provider_signature_date: str = Field(..., min_length=1)
    number_of_days: int = Field(..., gt=0)

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def validate_money(cls, value):
        return _money(value)

    @field_validator("provider_signature_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Provider signature name is required")
        return value

    @field_validator("provider_signature_date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return calendar_date(value)


class ServiceAgreementUpgrade(BaseModel):
    """A longer (or shorter) program: days, amounts and payment method. Signatures are kept."""
    number_of_days: int = Field(..., gt=0)
    total_program_fee: float = Field(..., gt=0)
    deposit_amount: float = Field(..., gt=0)
    deposit_percentage: float = Field(..., ge=0, le=100)
    remaining_balance: float = Field(..., ge=0)
    payment_method: str = Field(..., min_length=1, max_length=100)

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def validate_money(cls, value):
        return _money(value)

    @field_validator("payment_method")
    @classmethod
    def strip_payment_method(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Payment method is required")
        return value


class ServiceAgreementResponse(BaseModel):
    """Stored service agreement; every stored column is passed through."""
    id: str
    patient_id: Optional[str] = None
    intake_form_id: Optional[str] = None
    patient_first_name: str
    patient_last_name: str
    patient_email: str
    total_program_fee: float
    is_activated: bool
    activated_at: Optional[str] = None
    program_type: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        extra = "allow"


class ServiceAgreementEnvelope(BaseModel):
    success: bool = True
    data: ServiceAgreementResponse


class ServiceAgreementList(BaseModel):
    success: bool = True
    data: List[ServiceAgreementResponse]
