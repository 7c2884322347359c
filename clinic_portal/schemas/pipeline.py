"""
Pydantic schemas for the patient pipeline and the patient task list.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from schemas.intake import PatientIntakeResponse
from schemas.partial_intake import FormCompletion, PartialIntakeListItem

TaskType = Literal["intake", "medical_history", "service_agreement", "ibogaine_consent"]
TaskStatus = Literal["not_started", "in_progress", "completed"]


class PublicIntakeListItem(PatientIntakeResponse):
    """Intake submitted directly from the public site (no partial form)."""
    form_completion: FormCompletion


class PartialFormsResponse(BaseModel):
    success: bool = True
    data: List[PartialIntakeListItem]


class PublicIntakeFormsResponse(BaseModel):
    success: bool = True
    data: List[PublicIntakeListItem]


class PipelineSummary(BaseModel):
    total_inquiries: int = Field(..., description="Partial forms plus direct public intakes")
    partial_forms: int
    public_forms: int


class PipelineSummaryResponse(BaseModel):
    success: bool = True
    data: PipelineSummary


class PatientTask(BaseModel):
    """One onboarding task card on the patient dashboard."""
    id: str = Field(..., description="'<prefix>-<form id>' when completed, '<prefix>-new' otherwise", example="intake-new")
    type: TaskType
    form_id: str = Field("", description="Completed form id, empty while pending")
    title: str
    description: str
    status: TaskStatus
    estimated_time: str = Field(..., example="~5 min")
    is_required: bool = True
    is_optional: bool = False
    completed_at: Optional[str] = None
    link: str = Field(..., example="/intake?view=3f0e2c1a-8b6d-4d7e-9f55-0c2a1b3d4e5f")


class TaskStatistics(BaseModel):
    completed: int
    total: int
    in_progress: int
    required: int = Field(..., description="Required tasks still outstanding")
    optional: int


class PatientTasksResponse(BaseModel):
    success: bool = True
    tasks: List[PatientTask]
    statistics: TaskStatistics
