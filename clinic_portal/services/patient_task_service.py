"""
Service layer for the patient's onboarding task list.

Each of the four onboarding forms becomes a task card. A form filled in
before the patient had a portal account is still found: lookups fall back
from the profile id to the intake id, the email and finally the name.

    Task               Lookup order
    intake             email, then first + last name
    medical_history    intake id, email, then first + last name
    service_agreement  patient id, then email
    ibogaine_consent   patient id, intake id, then email
"""
import logging
from typing import Any, Dict, List, Optional

from repositories import (
    ConsentFormRepository,
    IntakeFormRepository,
    MedicalHistoryRepository,
    ProfileRepository,
    ServiceAgreementRepository,
)
from schemas.pipeline import PatientTask, PatientTasksResponse, TaskStatistics
from core.auth import CurrentUser
from core.exceptions import ProfileNotFoundError
from core.validators import normalize_email

logger = logging.getLogger(__name__)


def _task(
    prefix: str,
    task_type: str,
    title: str,
    description: str,
    estimated_time: str,
    form: Optional[Dict[str, Any]],
    completed_link: str,
    pending_link: str,
) -> PatientTask:
    if form:
        return PatientTask(
            id=f"{prefix}-{form['id']}",
            type=task_type,
            form_id=form["id"],
            title=title,
            description=description,
            status="completed",
            estimated_time=estimated_time,
            completed_at=form.get("created_at"),
            link=completed_link.format(id=form["id"]),
        )
    return PatientTask(
        id=f"{prefix}-new",
        type=task_type,
        title=title,
        description=description,
        status="not_started",
        estimated_time=estimated_time,
        link=pending_link,
    )


class PatientTaskService:
    """Derives task cards for the acting patient from the forms on file."""

    def __init__(
        self,
        profile_repository: ProfileRepository,
        intake_repository: IntakeFormRepository,
        medical_history_repository: MedicalHistoryRepository,
        agreement_repository: ServiceAgreementRepository,
        consent_repository: ConsentFormRepository,
    ):
        self._profile_repo = profile_repository
        self._intake_repo = intake_repository
        self._medical_repo = medical_history_repository
        self._agreement_repo = agreement_repository
        self._consent_repo = consent_repository

    def get_patient_tasks(self, user: CurrentUser) -> PatientTasksResponse:
        """
        Raises:
            ProfileNotFoundError: The acting profile no longer exists.
        """
        profile = self._profile_repo.get_by_id(user.id)
        if profile is None:
            raise ProfileNotFoundError("Patient profile not found")

        email = normalize_email(profile.get("email"))
        first_name = (profile.get("first_name") or "").strip()
        last_name = (profile.get("last_name") or "").strip()
        has_name = bool(first_name and last_name)

        intake = self._intake_repo.find_latest_by_email(email) if email else None
        if intake is None and has_name:
            intake = self._intake_repo.find_latest_by_name(first_name, last_name)
        intake_id = intake["id"] if intake else None

        medical = self._medical_repo.find_latest_by_intake_id(intake_id) if intake_id else None
        if medical is None and email:
            medical = self._medical_repo.find_latest_by_email(email)
        if medical is None and has_name:
            medical = self._medical_repo.find_latest_by_name(first_name, last_name)

        agreement = self._agreement_repo.find_latest_for_patient(user.id, email or None)

        consent = self._consent_repo.find_latest_for_patient(
            patient_id=user.id, intake_form_id=intake_id, email=email or None
        )

        tasks = [
            _task(
                "intake", "intake", "Application Form",
                "Patient intake and application information." if intake
                else "Complete your patient intake and application.",
                "~5 min", intake,
                "/intake?view={id}", "/intake",
            ),
            _task(
                "medical", "medical_history", "Medical Health History",
                "Helps our medical team prepare for your treatment.",
                "~15 min", medical,
                "/medical-history?view={id}",
                f"/medical-history?intake_form_id={intake_id}" if intake_id else "/medical-history",
            ),
            _task(
                "service", "service_agreement", "Service Agreement",
                "Review and sign the service agreement.",
                "~10 min", agreement,
                "/patient/service-agreement?view={id}", "/patient/service-agreement",
            ),
            _task(
                "ibogaine-consent", "ibogaine_consent", "Ibogaine Therapy Consent Form",
                "Consent form for Ibogaine therapy treatment.",
                "~5 min", consent,
                "/ibogaine-consent?view={id}",
                f"/ibogaine-consent?intake_form_id={intake_id}" if intake_id else "/ibogaine-consent",
            ),
        ]

        completed = sum(1 for t in tasks if t.status == "completed")
        statistics = TaskStatistics(
            completed=completed,
            total=sum(1 for t in tasks if t.is_required),
            in_progress=sum(1 for t in tasks if t.status == "in_progress"),
            required=sum(1 for t in tasks if t.is_required and t.status != "completed"),
            optional=sum(1 for t in tasks if t.is_optional),
        )
        logger.info(f"Derived patient tasks ({completed}/{len(tasks)} completed)")
        return PatientTasksResponse(tasks=tasks, statistics=statistics)
