"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.common import SuccessResponse, IdResponse, FillerFields
from schemas.profile import (
    ProfileCreate,
    ProfileUpdate,
    AvatarUpdate,
    ProfileResponse,
    StaffMember,
    PatientSearchResult,
    PatientSearchResponse,
)
from schemas.intake import PatientIntakeCreate, PatientIntakeResponse
from schemas.partial_intake import (
    PartialIntakeCreate,
    MinimalPartialIntakeCreate,
    PrefilledPartialIntakeCreate,
    PartialIntakeCreated,
    PartialIntakeResponse,
    PartialIntakeListItem,
    FormCompletion,
)
from schemas.medical_history import MedicalHistoryCreate, MedicalHistoryResponse
from schemas.service_agreement import (
    ServiceAgreementCreate,
    ServiceAgreementAdminUpdate,
    ServiceAgreementUpgrade,
    ServiceAgreementResponse,
    ServiceAgreementEnvelope,
)
from schemas.consent import ConsentFormCreate, ConsentAdminUpdate, ConsentFormResponse, ConsentFormEnvelope
from schemas.pipeline import (
    PatientTask,
    PatientTasksResponse,
    PipelineSummary,
    PipelineSummaryResponse,
    PartialFormsResponse,
    PublicIntakeFormsResponse,
    PublicIntakeListItem,
)
from schemas.lead import (
    LeadTaskCreate,
    LeadTaskUpdate,
    LeadTaskStatusUpdate,
    LeadTaskResponse,
    LeadTaskListResponse,
    LeadNotesUpdate,
    LeadNotesResponse,
    NotificationResponse,
    NotificationListResponse,
)
from schemas.messaging import (
    ConversationCreate,
    ConversationResponse,
    ConversationListResponse,
    MessageCreate,
    MessageResponse,
    MessageListResponse,
    UnreadCountResponse,
)
from schemas.document import DocumentUploadResponse, DocumentResponse
from schemas.marketing import MarketingOverviewResponse, TimelineResponse, PlatformDefinitionResponse
from schemas.dashboard import DashboardStats, DashboardStatsResponse, ReminderRunResult
from schemas.form_email import FormEmailRequest, FormEmailSent

__all__ = [
    # Common
    "SuccessResponse",
    "IdResponse",
    "FillerFields",
    # Profiles
    "ProfileCreate",
    "ProfileUpdate",
    "AvatarUpdate",
    "ProfileResponse",
    "StaffMember",
    "PatientSearchResult",
    "PatientSearchResponse",
    # Forms
    "PatientIntakeCreate",
    "PatientIntakeResponse",
    "PartialIntakeCreate",
    "MinimalPartialIntakeCreate",
    "PrefilledPartialIntakeCreate",
    "PartialIntakeCreated",
    "PartialIntakeResponse",
    "PartialIntakeListItem",
    "FormCompletion",
    "MedicalHistoryCreate",
    "MedicalHistoryResponse",
    "ServiceAgreementCreate",
    "ServiceAgreementAdminUpdate",
    "ServiceAgreementUpgrade",
    "ServiceAgreementResponse",
    "ServiceAgreementEnvelope",
    "ConsentFormCreate",
    "ConsentAdminUpdate",
    "ConsentFormResponse",
    "ConsentFormEnvelope",
    # Pipeline and tasks
    "PatientTask",
    "PatientTasksResponse",
    "PipelineSummary",
    "PipelineSummaryResponse",
    "PartialFormsResponse",
    "PublicIntakeFormsResponse",
    "PublicIntakeListItem",
    # Leads
    "LeadTaskCreate",
    "LeadTaskUpdate",
    "LeadTaskStatusUpdate",
    "LeadTaskResponse",
    "LeadTaskListResponse",
    "LeadNotesUpdate",
    "LeadNotesResponse",
    "NotificationResponse",
    "NotificationListResponse",
    # Messaging
    "ConversationCreate",
    "ConversationResponse",
    "ConversationListResponse",
    "MessageCreate",
    "MessageResponse",
    "MessageListResponse",
    "UnreadCountResponse",
    # Documents
    "DocumentUploadResponse",
    "DocumentResponse",
    # Marketing
    "MarketingOverviewResponse",
    "TimelineResponse",
    "PlatformDefinitionResponse",
    # Dashboard
    "DashboardStats",
    "DashboardStatsResponse",
    "ReminderRunResult",
    "FormEmailRequest",
    "FormEmailSent",
]
