"""
Service layer for service agreements.

Lifecycle:
    1. An owner/admin creates the agreement (activated immediately), or a
       patient submits one (inactive until an owner/admin activates it).
    2. Activation also activates the patient's ibogaine consent form.
    3. The patient signs the activated agreement; re-submitting updates the
       signature, payment method and uploaded file on the activated row
       instead of inserting a new one.
"""
import logging
from typing import Any, Dict, Optional

from repositories import IntakeFormRepository, ServiceAgreementRepository
from schemas import ServiceAgreementAdminUpdate, ServiceAgreementCreate, ServiceAgreementUpgrade
from services import email_templates
from services.consent_service import ConsentService, owns_form
from services.email_queue import EmailQueue
from services.medical_history_service import someone_else_filler
from core.auth import CurrentUser
from core.datetime_utils import now_iso
from core.exceptions import FormNotActivatedError, FormNotFoundError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

NOT_YET_AVAILABLE = "This form is not yet available. Please wait for admin to create and activate it."
OWN_FORMS_ONLY = "Unauthorized - You can only view your own forms"

PATIENT_RESIGN_FIELDS = (
    "payment_method",
    "patient_signature_name",
    "patient_signature_first_name",
    "patient_signature_last_name",
    "patient_signature_date",
    "patient_signature_data",
    "uploaded_file_url",
    "uploaded_file_name",
)


def is_patient_signed(agreement: Optional[Dict[str, Any]]) -> bool:
    """True when the patient's signature name and signature image are both present."""
    if not agreement:
        return False
    name = (agreement.get("patient_signature_name") or "").strip()
    data = (agreement.get("patient_signature_data") or "").strip()
    return bool(name and data)


class ServiceAgreementService:
    """Submission, activation and patient access for service agreements."""

    def __init__(
        self,
        agreement_repository: ServiceAgreementRepository,
        intake_repository: IntakeFormRepository,
        consent_service: ConsentService,
        email_queue: EmailQueue,
    ):
        self._repo = agreement_repository
        self._intake_repo = intake_repository
        self._consent_service = consent_service
        self._email_queue = email_queue

    def submit(self, data: ServiceAgreementCreate, user: CurrentUser) -> str:
        """
        Store or re-sign an agreement.

        Patients are always linked to their own profile. If the patient
        already has an activated agreement, only its patient signature,
        payment method and uploaded file are updated. New agreements created by owners/admins start activated.

        Returns:
            The id of the updated or created agreement.
        """
        patient_id = user.id if user.role == "patient" else data.patient_id
        intake = self._intake_repo.get_by_id(data.intake_form_id) if data.intake_form_id else None

        existing = self._repo.find_latest_for_patient(patient_id, data.patient_email, activated_only=True)
        if existing:
            resigned = {field: getattr(data, field) for field in PATIENT_RESIGN_FIELDS}
            self._repo.update(existing["id"], resigned)
            agreement_id = existing["id"]
            logger.info(f"Service agreement re-signed (id={agreement_id})")
        else:
            values = data.model_dump()
            values["patient_id"] = patient_id
            values["created_by"] = user.id
            if not values.get("program_type") and intake:
                values["program_type"] = intake.get("program_type")
            if user.has_owner_access:
                values["is_activated"] = True
                values["activated_at"] = now_iso()
            agreement_id = self._repo.add(values)["id"]
            logger.info(f"Service agreement created (id={agreement_id}, activated={user.has_owner_access})")

        if data.patient_signature_name.strip():
            self._send_confirmations(data, intake)
        return agreement_id

    def _send_confirmations(self, data: ServiceAgreementCreate, intake: Optional[Dict[str, Any]]) -> None:
        self._email_queue.enqueue(
            data.patient_email,
            email_templates.service_agreement_confirmation(
                data.patient_first_name, data.patient_first_name, data.patient_last_name
            ),
        )
        filler = someone_else_filler(intake)
        if filler:
            self._email_queue.enqueue(
                filler["filler_email"],
                email_templates.service_agreement_confirmation(
                    filler.get("filler_first_name") or "",
                    data.patient_first_name,
                    data.patient_last_name,
                    is_filler=True,
                ),
            )

    def activate(self, agreement_id: str) -> Dict[str, Any]:
        """
        Activate an agreement and the patient's consent form.

        Raises:
            FormNotFoundError: Unknown id.
        """
        agreement = self._repo.update(agreement_id, {"is_activated": True, "activated_at": now_iso()})
        if agreement is None:
            raise FormNotFoundError(form_type="service_agreement", form_id=agreement_id)
        logger.info(f"Service agreement activated (id={agreement_id})")

        self._consent_service.auto_activate(
            patient_id=agreement.get("patient_id"),
            intake_form_id=agreement.get("intake_form_id"),
            email=agreement.get("patient_email"),
            first_name=agreement.get("patient_first_name"),
            last_name=agreement.get("patient_last_name"),
            phone_number=agreement.get("patient_phone_number"),
        )
        return agreement

    def get_prefill(self, user: CurrentUser) -> Dict[str, Any]:
        """
        The acting patient's latest agreement, for pre-filling the signing form.

        Raises:
            NotFoundError: No agreement has been created for the patient.
            FormNotActivatedError: The latest agreement is not activated yet.
        """
        agreement = self._repo.find_latest_for_patient(user.id, user.email)
        if agreement is None:
            raise NotFoundError(NOT_YET_AVAILABLE)
        if not agreement["is_activated"]:
            raise FormNotActivatedError()
        return agreement

    def get_for_patient(self, agreement_id: str, user: CurrentUser) -> Dict[str, Any]:
        """
        Raises:
            FormNotFoundError: Unknown id.
            PermissionDeniedError: The agreement belongs to someone else.
            FormNotActivatedError: A non-admin opened an inactive agreement.
        """
        agreement = self._repo.get_by_id(agreement_id)
        if agreement is None:
            raise FormNotFoundError(form_type="service_agreement", form_id=agreement_id)

        if user.has_owner_access:
            return agreement
        if not owns_form(user, agreement.get("patient_id"), agreement.get("patient_email")):
            raise PermissionDeniedError(OWN_FORMS_ONLY)
        if not agreement["is_activated"]:
            raise FormNotActivatedError()
        return agreement

    def _require(self, agreement_id: str) -> Dict[str, Any]:
        agreement = self._repo.get_by_id(agreement_id)
        if agreement is None:
            raise FormNotFoundError(form_type="service_agreement", form_id=agreement_id)
        return agreement

    def update_admin_fields(self, agreement_id: str, data: ServiceAgreementAdminUpdate) -> Dict[str, Any]:
        """
        Save the owner/admin part of an agreement. The program type follows
        the linked intake form when that form names one.

        Raises:
            FormNotFoundError: Unknown id.
        """
        agreement = self._require(agreement_id)
        values = data.model_dump()
        intake_id = agreement.get("intake_form_id")
        intake = self._intake_repo.get_by_id(intake_id) if intake_id else None
        if intake and intake.get("program_type"):
            values["program_type"] = intake["program_type"]

        updated = self._repo.update(agreement_id, values)
        logger.info(f"Service agreement admin fields updated (id={agreement_id})")
        return updated

    def upgrade(self, agreement_id: str, data: ServiceAgreementUpgrade) -> Dict[str, Any]:
        """
        Change the program length and pricing; signatures are left as they are.

        Raises:
            FormNotFoundError: Unknown id.
        """
        self._require(agreement_id)
        updated = self._repo.update(agreement_id, data.model_dump())
        logger.info(f"Service agreement upgraded (id={agreement_id}, days={data.number_of_days})")
        return updated
