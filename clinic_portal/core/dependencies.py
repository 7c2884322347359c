"""
FastAPI Dependency Injection configuration for the Clinic Portal API.

This module provides the dependency injection (DI) infrastructure. It enables:
- Clean separation between API, Service, and Repository layers
- Easy testing with fake dependencies (email, Metricool)
- Centralized configuration of all dependencies

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic)
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLite Connection)

Usage in Routers:
    from core.dependencies import get_intake_service

    @router.post("")
    async def submit_intake(
        form: PatientIntakeCreate,
        intake_service: IntakeService = Depends(get_intake_service)
    ):
        return intake_service.submit(form, ...)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_email_queue] = lambda: fake_queue

Celery tasks cannot use Depends(), so they call these functions directly
with every argument passed explicitly (see build_reminder_service).
"""
import logging
from typing import Optional

from fastapi import Depends

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

# The Database class is imported when first needed to avoid circular imports
_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (process-wide singleton).

    Returns:
        Database: The configured database instance.
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.clinic_portal_db_busy_timeout
        )
        logger.info("Database initialized successfully")

    return _database_instance


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_profile_repository(db: "Database" = Depends(get_database)) -> "ProfileRepository":
    """
    Get a ProfileRepository instance with database injected.

    Returns:
        ProfileRepository: Repository for portal user profiles.
    """
    from repositories import ProfileRepository

    return ProfileRepository(db=db)


def get_intake_repository(db: "Database" = Depends(get_database)) -> "IntakeFormRepository":
    from repositories import IntakeFormRepository

    return IntakeFormRepository(db=db)


def get_partial_intake_repository(db: "Database" = Depends(get_database)) -> "PartialIntakeRepository":
    from repositories import PartialIntakeRepository

    return PartialIntakeRepository(db=db)


def get_medical_history_repository(db: "Database" = Depends(get_database)) -> "MedicalHistoryRepository":
    from repositories import MedicalHistoryRepository

    return MedicalHistoryRepository(db=db)


def get_service_agreement_repository(db: "Database" = Depends(get_database)) -> "ServiceAgreementRepository":
    from repositories import ServiceAgreementRepository

    return ServiceAgreementRepository(db=db)


def get_consent_repository(db: "Database" = Depends(get_database)) -> "ConsentFormRepository":
    from repositories import ConsentFormRepository

    return ConsentFormRepository(db=db)


def get_lead_task_repository(db: "Database" = Depends(get_database)) -> "LeadTaskRepository":
    from repositories import LeadTaskRepository

    return LeadTaskRepository(db=db)


def get_lead_note_repository(db: "Database" = Depends(get_database)) -> "LeadNoteRepository":
    from repositories import LeadNoteRepository

    return LeadNoteRepository(db=db)


def get_notification_repository(db: "Database" = Depends(get_database)) -> "NotificationRepository":
    from repositories import NotificationRepository

    return NotificationRepository(db=db)


def get_messaging_repository(db: "Database" = Depends(get_database)) -> "MessagingRepository":
    from repositories import MessagingRepository

    return MessagingRepository(db=db)


def get_document_repository(db: "Database" = Depends(get_database)) -> "DocumentRepository":
    from repositories import DocumentRepository

    return DocumentRepository(db=db)


# =============================================================================
# EXTERNAL SERVICE DEPENDENCIES
# =============================================================================

def get_email_service() -> "EmailService":
    """
    Get an EmailService instance (Gmail REST API).

    Credentials come from settings; a missing refresh token makes every
    send raise EmailDeliveryError rather than failing at startup.
    """
    from services.email_service import EmailService

    return EmailService()


def get_email_queue() -> "EmailQueue":
    """
    Get an EmailQueue that hands emails to the Celery delivery task.
    """
    from services.email_queue import EmailQueue

    return EmailQueue()


def get_metricool_service() -> "MetricoolService":
    from services.metricool_service import MetricoolService

    return MetricoolService()


def get_marketing_graph_service(
    metricool_service: "MetricoolService" = Depends(get_metricool_service),
) -> "MarketingGraphService":
    """
    Get a MarketingGraphService for Plotly timeline charts.
    """
    from services.graph import MarketingGraphService

    return MarketingGraphService(metricool_service=metricool_service)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_profile_service(
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
) -> "ProfileService":
    from services import ProfileService

    return ProfileService(profile_repository=profile_repo)


def get_intake_service(
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    partial_repo: "PartialIntakeRepository" = Depends(get_partial_intake_repository),
    email_queue: "EmailQueue" = Depends(get_email_queue),
) -> "IntakeService":
    """
    Get an IntakeService with repositories and the email queue injected.

    Returns:
        IntakeService: Service for public application submissions.
    """
    from services import IntakeService

    return IntakeService(
        intake_repository=intake_repo,
        partial_intake_repository=partial_repo,
        email_queue=email_queue,
    )


def get_partial_intake_service(
    partial_repo: "PartialIntakeRepository" = Depends(get_partial_intake_repository),
    email_service: "EmailService" = Depends(get_email_service),
) -> "PartialIntakeService":
    from services import PartialIntakeService

    return PartialIntakeService(
        partial_intake_repository=partial_repo,
        email_service=email_service,
        link_days=settings.partial_intake_link_days,
        portal_base_url=settings.portal_base_url.rstrip("/"),
    )


def get_form_email_service(
    partial_repo: "PartialIntakeRepository" = Depends(get_partial_intake_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
    email_service: "EmailService" = Depends(get_email_service),
) -> "FormEmailService":
    from services import FormEmailService

    return FormEmailService(
        partial_intake_repository=partial_repo,
        intake_repository=intake_repo,
        profile_repository=profile_repo,
        email_service=email_service,
        link_days=settings.partial_intake_link_days,
        portal_base_url=settings.portal_base_url.rstrip("/"),
    )


def get_medical_history_service(
    medical_repo: "MedicalHistoryRepository" = Depends(get_medical_history_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    email_queue: "EmailQueue" = Depends(get_email_queue),
) -> "MedicalHistoryService":
    from services import MedicalHistoryService

    return MedicalHistoryService(
        medical_history_repository=medical_repo,
        intake_repository=intake_repo,
        email_queue=email_queue,
    )


def get_consent_service(
    consent_repo: "ConsentFormRepository" = Depends(get_consent_repository),
    email_queue: "EmailQueue" = Depends(get_email_queue),
) -> "ConsentService":
    from services import ConsentService

    return ConsentService(
        consent_repository=consent_repo,
        email_queue=email_queue,
        facilitator_name=settings.default_facilitator_name,
    )


def get_service_agreement_service(
    agreement_repo: "ServiceAgreementRepository" = Depends(get_service_agreement_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    consent_service: "ConsentService" = Depends(get_consent_service),
    email_queue: "EmailQueue" = Depends(get_email_queue),
) -> "ServiceAgreementService":
    """
    Get a ServiceAgreementService.

    The consent service is injected because activating an agreement
    auto-activates the patient's consent form.
    """
    from services import ServiceAgreementService

    return ServiceAgreementService(
        agreement_repository=agreement_repo,
        intake_repository=intake_repo,
        consent_service=consent_service,
        email_queue=email_queue,
    )


def get_pipeline_service(
    partial_repo: "PartialIntakeRepository" = Depends(get_partial_intake_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    medical_repo: "MedicalHistoryRepository" = Depends(get_medical_history_repository),
    agreement_repo: "ServiceAgreementRepository" = Depends(get_service_agreement_repository),
    consent_repo: "ConsentFormRepository" = Depends(get_consent_repository),
) -> "PipelineService":
    from services import PipelineService

    return PipelineService(
        partial_intake_repository=partial_repo,
        intake_repository=intake_repo,
        medical_history_repository=medical_repo,
        agreement_repository=agreement_repo,
        consent_repository=consent_repo,
    )


def get_patient_task_service(
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    medical_repo: "MedicalHistoryRepository" = Depends(get_medical_history_repository),
    agreement_repo: "ServiceAgreementRepository" = Depends(get_service_agreement_repository),
    consent_repo: "ConsentFormRepository" = Depends(get_consent_repository),
) -> "PatientTaskService":
    from services import PatientTaskService

    return PatientTaskService(
        profile_repository=profile_repo,
        intake_repository=intake_repo,
        medical_history_repository=medical_repo,
        agreement_repository=agreement_repo,
        consent_repository=consent_repo,
    )


def get_lead_service(
    task_repo: "LeadTaskRepository" = Depends(get_lead_task_repository),
    note_repo: "LeadNoteRepository" = Depends(get_lead_note_repository),
    notification_repo: "NotificationRepository" = Depends(get_notification_repository),
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
) -> "LeadService":
    from services import LeadService

    return LeadService(
        task_repository=task_repo,
        note_repository=note_repo,
        notification_repository=notification_repo,
        profile_repository=profile_repo,
    )


def get_notification_service(
    notification_repo: "NotificationRepository" = Depends(get_notification_repository),
) -> "NotificationService":
    from services import NotificationService

    return NotificationService(notification_repository=notification_repo)


def get_messaging_service(
    messaging_repo: "MessagingRepository" = Depends(get_messaging_repository),
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
) -> "MessagingService":
    from services import MessagingService

    return MessagingService(messaging_repository=messaging_repo, profile_repository=profile_repo)


def get_upload_service(
    document_repo: "DocumentRepository" = Depends(get_document_repository),
) -> "UploadService":
    """
    Get an UploadService instance.

    UploadService handles document uploads and is configured via settings.
    """
    from services import UploadService

    return UploadService(
        document_repository=document_repo,
        upload_dir=settings.clinic_portal_upload_dir,
        max_size=settings.clinic_portal_upload_max_size
    )


def get_dashboard_service(
    agreement_repo: "ServiceAgreementRepository" = Depends(get_service_agreement_repository),
) -> "DashboardService":
    from services import DashboardService

    return DashboardService(agreement_repository=agreement_repo)


def get_marketing_service(
    metricool_service: "MetricoolService" = Depends(get_metricool_service),
) -> "MarketingService":
    from services import MarketingService

    return MarketingService(metricool_service=metricool_service)


def get_reminder_service(
    profile_repo: "ProfileRepository" = Depends(get_profile_repository),
    intake_repo: "IntakeFormRepository" = Depends(get_intake_repository),
    medical_repo: "MedicalHistoryRepository" = Depends(get_medical_history_repository),
    agreement_repo: "ServiceAgreementRepository" = Depends(get_service_agreement_repository),
    email_service: "EmailService" = Depends(get_email_service),
) -> "ReminderService":
    from services import ReminderService

    return ReminderService(
        profile_repository=profile_repo,
        intake_repository=intake_repo,
        medical_history_repository=medical_repo,
        agreement_repository=agreement_repo,
        email_service=email_service,
        grace_hours=settings.reminder_activation_grace_hours,
    )


def build_reminder_service() -> "ReminderService":
    """
    Assemble a ReminderService outside a request (Celery beat task).
    """
    db = get_database()
    return get_reminder_service(
        profile_repo=get_profile_repository(db),
        intake_repo=get_intake_repository(db),
        medical_repo=get_medical_history_repository(db),
        agreement_repo=get_service_agreement_repository(db),
        email_service=get_email_service(),
    )

