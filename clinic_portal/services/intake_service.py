"""
Service layer for public patient intake forms.

Architecture:
    API Layer (routers) → IntakeService → IntakeFormRepository / PartialIntakeRepository → Database
"""
import logging
from typing import Optional

from repositories import IntakeFormRepository, PartialIntakeRepository
from schemas import PatientIntakeCreate, PatientIntakeResponse
from services import email_templates
from services.email_queue import EmailQueue
from core.auth import CurrentUser
from core.exceptions import FormNotFoundError, PermissionDeniedError
from core.validators import normalize_email

logger = logging.getLogger(__name__)

OWN_FORMS_ONLY = "Unauthorized - You can only view your own forms"


class IntakeService:
    """Stores intake submissions and links them to the partial form they complete."""

    def __init__(
        self,
        intake_repository: IntakeFormRepository,
        partial_intake_repository: PartialIntakeRepository,
        email_queue: EmailQueue,
    ):
        self._intake_repo = intake_repository
        self._partial_repo = partial_intake_repository
        self._email_queue = email_queue

    def submit(
        self,
        data: PatientIntakeCreate,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        """
        Store a submitted intake form and queue the confirmation email.

        When `partial_form_id` names a partial intake, that form is marked
        completed and linked to the new intake. An unknown partial id is
        logged and otherwise ignored.

        Returns:
            The new intake form id.
        """
        values = data.model_dump(exclude={"partial_form_id"})
        values["ip_address"] = ip_address
        values["user_agent"] = user_agent

        form = self._intake_repo.add(values)
        logger.info(f"Intake form submitted (id={form['id']}, program={data.program_type})")

        if data.partial_form_id:
            if self._partial_repo.mark_completed(data.partial_form_id, form["id"]):
                logger.info(f"Partial intake {data.partial_form_id} completed by intake {form['id']}")
            else:
                logger.warning(f"Intake referenced unknown partial form {data.partial_form_id}")

        self._email_queue.enqueue(form["email"], email_templates.intake_confirmation(form["first_name"]))
        return form["id"]

    def get_form(self, form_id: str, user: CurrentUser) -> PatientIntakeResponse:
        """
        Staff may view any intake; other users only forms with their email.

        Raises:
            FormNotFoundError: Unknown id.
            PermissionDeniedError: The form belongs to someone else.
        """
        form = self._intake_repo.get_by_id(form_id)
        if form is None:
            raise FormNotFoundError(form_type="intake", form_id=form_id)

        if not user.is_staff and normalize_email(form["email"]) != normalize_email(user.email):
            raise PermissionDeniedError(OWN_FORMS_ONLY)

        return PatientIntakeResponse(**form)
