"""
Service layer for business logic.

This module contains all business logic and orchestration services.

Note: Some services are not re-exported here to avoid circular imports.
Import them directly from their modules:
- from services.email_service import EmailService
- from services.metricool_service import MetricoolService
- from services.graph import MarketingGraphService
"""
from services.profile_service import ProfileService
from services.intake_service import IntakeService
from services.partial_intake_service import PartialIntakeService
from services.medical_history_service import MedicalHistoryService
from services.consent_service import ConsentService
from services.service_agreement_service import ServiceAgreementService
from services.pipeline_service import PipelineService
from services.patient_task_service import PatientTaskService
from services.lead_service import LeadService, NotificationService
from services.messaging_service import MessagingService
from services.upload_service import UploadService
from services.dashboard_service import DashboardService
from services.reminder_service import ReminderService
from services.form_email_service import FormEmailService
from services.marketing_service import MarketingService

__all__ = [
    "ProfileService",
    "IntakeService",
    "PartialIntakeService",
    "MedicalHistoryService",
    "ConsentService",
    "ServiceAgreementService",
    "PipelineService",
    "PatientTaskService",
    "LeadService",
    "NotificationService",
    "MessagingService",
    "UploadService",
    "DashboardService",
    "ReminderService",
    "FormEmailService",
    "MarketingService",
]
