"""
Service layer for the onboarding form reminder sweep.

For every patient with an email, remind them about each form still missing:
    Application Form        no intake form with their email
    Medical Health History  no medical history form with their email
    Service Agreement       latest activated agreement unsigned by the
                            patient and activated more than the grace
                            period ago
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from repositories import IntakeFormRepository, MedicalHistoryRepository, ProfileRepository, ServiceAgreementRepository
from services import email_templates
from services.email_service import EmailService
from services.service_agreement_service import is_patient_signed
from core.config import REMINDER_ACTIVATION_GRACE_HOURS
from core.datetime_utils import hours_since, utc_now
from core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class ReminderService:
    """Sends form reminders synchronously and counts the outcome."""

    def __init__(
        self,
        profile_repository: ProfileRepository,
        intake_repository: IntakeFormRepository,
        medical_history_repository: MedicalHistoryRepository,
        agreement_repository: ServiceAgreementRepository,
        email_service: EmailService,
        grace_hours: int = REMINDER_ACTIVATION_GRACE_HOURS,
    ):
        self._profile_repo = profile_repository
        self._intake_repo = intake_repository
        self._medical_repo = medical_history_repository
        self._agreement_repo = agreement_repository
        self._email_service = email_service
        self._grace_hours = grace_hours

    def missing_forms(self, patient: Dict[str, str], now: Optional[datetime] = None) -> List[str]:
        """Names of the forms the patient should be reminded about."""
        email = patient["email"]
        missing = []

        if self._intake_repo.find_latest_by_email(email) is None:
            missing.append("Application Form")

        if self._medical_repo.find_latest_by_email(email) is None:
            missing.append("Medical Health History")

        agreement = self._agreement_repo.find_latest_for_patient(patient["id"], email, activated_only=True)
        if agreement and not is_patient_signed(agreement):
            elapsed = hours_since(agreement.get("activated_at"), now)
            if elapsed is not None and elapsed > self._grace_hours:
                missing.append("Service Agreement")

        return missing

    def send_reminders(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Run the sweep once.

        Returns:
            {"patients_checked": n, "sent": n, "failed": n}
        """
        now = now or utc_now()
        patients = self._profile_repo.list_patients_with_email()
        sent = 0
        failed = 0

        for patient in patients:
            for form_name in self.missing_forms(patient, now):
                content = email_templates.form_reminder(patient.get("first_name") or "there", form_name)
                try:
                    self._email_service.send(patient["email"], content.subject, content.html)
                    sent += 1
                except EmailDeliveryError as e:
                    failed += 1
                    logger.error(f"Reminder '{form_name}' to patient {patient['id']} failed: {e.detail}")

        logger.info(f"Form reminders: checked={len(patients)} sent={sent} failed={failed}")
        return {"patients_checked": len(patients), "sent": sent, "failed": failed}
