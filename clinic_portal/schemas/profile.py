"""
Pydantic schemas for profiles (portal user accounts).
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

from core.validators import check_email, check_optional_phone

Role = Literal["owner", "admin", "manager", "doctor", "psych", "nurse", "driver", "patient"]


class ProfileCreate(BaseModel):
    """Schema for creating a profile. Emails are unique across profiles."""
    email: str = Field(..., max_length=255, description="Login email (unique)", example="jane@example.com")
    first_name: str = Field(..., min_length=1, max_length=100, example="Jane")
    last_name: str = Field(..., min_length=1, max_length=100, example="Doe")
    role: Role = Field("patient", description="Portal role")
    phone: Optional[str] = Field(None, max_length=50)
    designation: Optional[str] = Field(None, max_length=100, description="Job title shown to staff")
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        return check_optional_phone(value)


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    is_online: bool = False
    last_seen_at: Optional[str] = None
    created_at: str
    updated_at: str


class StaffMember(BaseModel):
    """Staff profile as offered in task assignment pickers."""
    id: str
    name: str = Field(..., description="'First Last', else email, else id")
    email: Optional[str] = None
    role: str
    designation: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile. Only fields that are sent change."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[HttpUrl] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def reject_null_name(cls, value):
        if value is None:
            raise ValueError("Name cannot be null")
        return value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        return check_optional_phone(value)


class AvatarUpdate(BaseModel):
    avatar_url: HttpUrl = Field(..., description="Public URL of the uploaded avatar image")


class PatientSearchResult(BaseModel):
    id: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class PatientSearchResponse(BaseModel):
    success: bool = True
    data: List[PatientSearchResult]
