"""
Service layer for medical health history forms.
"""
import logging
from typing import Any, Dict, Optional

from repositories import IntakeFormRepository, MedicalHistoryRepository
from schemas import MedicalHistoryCreate
from services import email_templates
from services.email_queue import EmailQueue
from core.auth import CurrentUser
from core.exceptions import FormNotFoundError, PermissionDeniedError
from core.validators import normalize_email

logger = logging.getLogger(__name__)

OWN_FORMS_ONLY = "Unauthorized - You can only view your own forms"


def someone_else_filler(intake: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """The intake when it was filled in by someone else who left an email, else None."""
    if intake and intake.get("filled_by") == "someone_else" and intake.get("filler_email"):
        return intake
    return None


class MedicalHistoryService:
    """Stores medical history submissions and sends confirmations."""

    def __init__(
        self,
        medical_history_repository: MedicalHistoryRepository,
        intake_repository: IntakeFormRepository,
        email_queue: EmailQueue,
    ):
        self._repo = medical_history_repository
        self._intake_repo = intake_repository
        self._email_queue = email_queue

    def submit(self, data: MedicalHistoryCreate) -> str:
        """
        Store the form, then queue a confirmation to the patient and, when
        the linked intake was filled in by someone else, to that person too.

        Returns:
            The new form id.
        """
        form = self._repo.add(data.model_dump())
        logger.info(f"Medical history submitted (id={form['id']}, intake={form.get('intake_form_id')})")

        self._email_queue.enqueue(
            form["email"],
            email_templates.medical_history_confirmation(form["first_name"], form["first_name"], form["last_name"]),
        )

        intake = self._intake_repo.get_by_id(data.intake_form_id) if data.intake_form_id else None
        filler = someone_else_filler(intake)
        if filler:
            self._email_queue.enqueue(
                filler["filler_email"],
                email_templates.medical_history_confirmation(
                    filler.get("filler_first_name") or "",
                    form["first_name"],
                    form["last_name"],
                    is_filler=True,
                ),
            )

        return form["id"]

    def get_for_patient(self, form_id: str, user: CurrentUser) -> Dict[str, Any]:
        """
        Owners and admins see any form; everyone else only forms with their email.

        Raises:
            FormNotFoundError: Unknown id.
            PermissionDeniedError: The form belongs to someone else.
        """
        form = self._repo.get_by_id(form_id)
        if form is None:
            raise FormNotFoundError(form_type="medical_history", form_id=form_id)

        if not user.has_owner_access and normalize_email(form["email"]) != normalize_email(user.email):
            raise PermissionDeniedError(OWN_FORMS_ONLY)
        return form
