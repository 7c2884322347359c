"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database, BaseRepository
from repositories.profile_repository import ProfileRepository
from repositories.intake_repository import IntakeFormRepository, PartialIntakeRepository
from repositories.medical_history_repository import MedicalHistoryRepository
from repositories.service_agreement_repository import ServiceAgreementRepository
from repositories.consent_repository import ConsentFormRepository
from repositories.lead_repository import LeadTaskRepository, LeadNoteRepository
from repositories.notification_repository import NotificationRepository
from repositories.messaging_repository import MessagingRepository
from repositories.document_repository import DocumentRepository

__all__ = [
    "Database",
    "BaseRepository",
    "ProfileRepository",
    "IntakeFormRepository",
    "PartialIntakeRepository",
    "MedicalHistoryRepository",
    "ServiceAgreementRepository",
    "ConsentFormRepository",
    "LeadTaskRepository",
    "LeadNoteRepository",
    "NotificationRepository",
    "MessagingRepository",
    "DocumentRepository",
]
