"""
Pydantic schemas for the medical health history form.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.validators import check_email, check_phone
from schemas.common import OptionalIntakeLink


class MedicalHistoryCreate(OptionalIntakeLink):
    """Schema for a submitted medical history form."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: str = Field(..., min_length=1, description="YYYY-MM-DD")
    gender: Literal["M", "F", "other"]
    weight: str = Field(..., min_length=1, max_length=50, example="72 kg")
    height: str = Field(..., min_length=1, max_length=50, example="178 cm")
    phone_number: str = Field(..., max_length=50)
    email: str = Field(..., max_length=255)
    emergency_contact_name: str = Field(..., min_length=1, max_length=200)
    emergency_contact_phone: str = Field(..., max_length=50)

    primary_care_provider: str = Field(..., min_length=1)
    other_physicians: Optional[str] = None
    practitioners_therapists: Optional[str] = None
    current_health_status: str = Field(..., min_length=1)
    reason_for_coming: str = Field(..., min_length=1)
    medical_conditions: str = Field(..., min_length=1)
    substance_use_history: str = Field(..., min_length=1)
    family_personal_health_info: Optional[str] = None
    pain_stiffness_swelling: Optional[str] = None
    metabolic_health_concerns: Optional[str] = None
    digestive_health: Optional[str] = None
    reproductive_health: Optional[str] = None
    hormonal_health: Optional[str] = None
    immune_health: Optional[str] = None
    food_allergies_intolerance: Optional[str] = None
    difficulties_chewing_swallowing: Optional[str] = None
    medications_medical_use: Optional[str] = None
    medications_mental_health: Optional[str] = None
    mental_health_conditions: Optional[str] = None
    mental_health_treatment: str = Field(..., min_length=1)
    allergies: str = Field(..., min_length=1)
    previous_psychedelics_experiences: str = Field(..., min_length=1)

    has_physical_examination: bool = False
    physical_examination_records: Optional[str] = None
    physical_examination_file_url: Optional[str] = None
    physical_examination_file_name: Optional[str] = None
    has_cardiac_evaluation: bool = False
    cardiac_evaluation: Optional[str] = None
    cardiac_evaluation_file_url: Optional[str] = None
    cardiac_evaluation_file_name: Optional[str] = None
    has_liver_function_tests: bool = False
    liver_function_tests: Optional[str] = None
    liver_function_tests_file_url: Optional[str] = None
    liver_function_tests_file_name: Optional[str] = None
    is_pregnant: bool = False

    dietary_lifestyle_habits: str = Field(..., min_length=1)
    physical_activity_exercise: str = Field(..., min_length=1)

    signature_data: str = Field(..., min_length=1, description="Signature image as a data URL")
    signature_date: str = Field(..., min_length=1)

    uploaded_file_url: Optional[str] = None
    uploaded_file_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("phone_number", "emergency_contact_phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return check_phone(value)


class MedicalHistoryResponse(BaseModel):
    """Stored medical history form; every stored column is passed through."""
    id: str
    intake_form_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    created_at: str
    updated_at: str

    class Config:
        extra = "allow"
