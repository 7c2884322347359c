"""
Service layer for ibogaine therapy consent forms.

Consent forms are activated automatically when a patient's service
agreement is activated; the patient then signs the activated form.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from repositories import ConsentFormRepository
from schemas import ConsentAdminUpdate, ConsentFormCreate
from services import email_templates
from services.email_queue import EmailQueue
from core.auth import CurrentUser
from core.config import DEFAULT_FACILITATOR_NAME, PORTAL_BASE_URL
from core.exceptions import FormNotActivatedError, FormNotFoundError, PermissionDeniedError
from core.validators import normalize_email

logger = logging.getLogger(__name__)

OWN_FORMS_ONLY = "Unauthorized - You can only view your own forms"


def consent_form_link(intake_form_id: Optional[str] = None, portal_base_url: str = PORTAL_BASE_URL) -> str:
    link = f"{portal_base_url.rstrip('/')}/patient/ibogaine-consent"
    if intake_form_id:
        link += "?" + urlencode({"intake_form_id": intake_form_id})
    return link


def owns_form(user: CurrentUser, patient_id: Optional[str], email: Optional[str]) -> bool:
    """True when the form is linked to the user's profile id or carries the user's email."""
    if patient_id and patient_id == user.id:
        return True
    return bool(email) and normalize_email(email) == normalize_email(user.email)


class ConsentService:
    """Stores, activates and serves ibogaine consent forms."""

    def __init__(
        self,
        consent_repository: ConsentFormRepository,
        email_queue: EmailQueue,
        facilitator_name: str = DEFAULT_FACILITATOR_NAME,
    ):
        self._repo = consent_repository
        self._email_queue = email_queue
        self._facilitator_name = facilitator_name

    def submit(self, data: ConsentFormCreate) -> str:
        """
        Sign the patient's activated form, or store a new activated form when
        there is none.

        Returns:
            The id of the updated or created form.
        """
        values = data.model_dump()
        existing = self._repo.find_latest_for_patient(
            patient_id=data.patient_id,
            intake_form_id=data.intake_form_id,
            email=data.email,
            activated_only=True,
        )

        if existing:
            # Keep existing links when the submission leaves them blank
            for key in ("patient_id", "intake_form_id"):
                if not values.get(key):
                    values.pop(key)
            self._repo.update(existing["id"], values)
            logger.info(f"Consent form signed (id={existing['id']})")
            return existing["id"]

        values["is_activated"] = True
        form = self._repo.add(values)
        logger.info(f"Consent form created on submit (id={form['id']})")
        return form["id"]

    def auto_activate(
        self,
        patient_id: Optional[str],
        intake_form_id: Optional[str],
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        phone_number: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Activate the patient's consent form, creating it if needed, and queue
        the consent-form email.

        Called when the patient's service agreement is activated.
        """
        existing = self._repo.find_latest_for_patient(
            patient_id=patient_id, intake_form_id=intake_form_id, email=email
        )

        if existing:
            form = self._repo.update(existing["id"], {"is_activated": True})
            logger.info(f"Consent form activated (id={form['id']})")
        else:
            form = self._repo.add({
                "patient_id": patient_id,
                "intake_form_id": intake_form_id,
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "phone_number": phone_number,
                "facilitator_doctor_name": self._facilitator_name,
                "is_activated": True,
            })
            logger.info(f"Consent form created and activated (id={form['id']})")

        if email:
            link = consent_form_link(intake_form_id or form.get("intake_form_id"))
            self._email_queue.enqueue(email, email_templates.ibogaine_consent_invitation(first_name or "", link))
        return form

    def get_for_patient(self, form_id: str, user: CurrentUser) -> Dict[str, Any]:
        """
        Raises:
            FormNotFoundError: Unknown id.
            PermissionDeniedError: The form belongs to someone else.
            FormNotActivatedError: A non-admin opened a form that is not active yet.
        """
        form = self._repo.get_by_id(form_id)
        if form is None:
            raise FormNotFoundError(form_type="ibogaine_consent", form_id=form_id)

        if user.has_owner_access:
            return form
        if not owns_form(user, form.get("patient_id"), form.get("email")):
            raise PermissionDeniedError(OWN_FORMS_ONLY)
        if not form["is_activated"]:
            raise FormNotActivatedError()
        return form

    def update_admin_fields(self, form_id: str, data: ConsentAdminUpdate) -> Dict[str, Any]:
        """
        Save the owner/admin part of a consent form. The facilitator keeps its
        current value unless a new name is given.

        Raises:
            FormNotFoundError: Unknown id.
        """
        values = data.model_dump(exclude_none=True)
        form = self._repo.update(form_id, values)
        if form is None:
            raise FormNotFoundError(form_type="ibogaine_consent", form_id=form_id)
        logger.info(f"Consent form admin fields updated (id={form_id})")
        return form
