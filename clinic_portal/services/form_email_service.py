"""
Service layer for re-sending onboarding form links from the pipeline.

Staff pick a prospect and a form; the link goes to whoever fills the forms
in. That is the filler when the intake was filled in by someone else,
otherwise the patient.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from repositories import IntakeFormRepository, PartialIntakeRepository, ProfileRepository
from schemas.form_email import FormEmailRequest, FormEmailSent
from services import email_templates
from services.email_service import EmailService
from core.config import PARTIAL_INTAKE_LINK_DAYS, PORTAL_BASE_URL
from core.exceptions import NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

FORM_PATHS = {
    "medical": ("Medical Health History", "/medical-history"),
    "service": ("Service Agreement", "/patient/service-agreement"),
    "ibogaine": ("Ibogaine Therapy Consent", "/patient/ibogaine-consent"),
}


@dataclass
class Recipient:
    email: str
    name: str
    patient_first_name: Optional[str] = None
    patient_last_name: Optional[str] = None
    filled_by: str = "self"
    intake_form_id: Optional[str] = None


def _both_names(first: Optional[str], last: Optional[str]) -> Optional[str]:
    return f"{first} {last}" if first and last else None


def _recipient_from_form(form: Dict[str, Any], intake_form_id: Optional[str]) -> Optional[Recipient]:
    """Filler when someone else fills the forms in and left an email, otherwise the patient."""
    filled_by = form.get("filled_by") or "self"
    filler_email = form.get("filler_email")
    if filled_by == "someone_else" and filler_email:
        email = filler_email
        name = form.get("recipient_name") or _both_names(
            form.get("filler_first_name"), form.get("filler_last_name")
        ) or filler_email
    else:
        email = form.get("recipient_email") or form.get("email")
        name = form.get("recipient_name") or _both_names(form.get("first_name"), form.get("last_name")) or email
    if not email:
        return None
    return Recipient(
        email=email,
        name=name,
        patient_first_name=form.get("first_name"),
        patient_last_name=form.get("last_name"),
        filled_by=filled_by,
        intake_form_id=intake_form_id,
    )


class FormEmailService:
    """Resolves the recipient of a form link and sends it."""

    def __init__(
        self,
        partial_intake_repository: PartialIntakeRepository,
        intake_repository: IntakeFormRepository,
        profile_repository: ProfileRepository,
        email_service: EmailService,
        link_days: int = PARTIAL_INTAKE_LINK_DAYS,
        portal_base_url: str = PORTAL_BASE_URL,
    ):
        self._partial_repo = partial_intake_repository
        self._intake_repo = intake_repository
        self._profile_repo = profile_repository
        self._email_service = email_service
        self._link_days = link_days
        self._portal_base_url = portal_base_url.rstrip("/")

    def resolve_recipient(self, data: FormEmailRequest) -> Optional[Recipient]:
        """Partial form first, then intake form, then patient profile."""
        if data.partial_form_id:
            partial = self._partial_repo.get_by_id(data.partial_form_id)
            if partial:
                recipient = _recipient_from_form(partial, partial.get("completed_form_id"))
                if recipient:
                    return recipient

        if data.intake_form_id:
            intake = self._intake_repo.get_by_id(data.intake_form_id)
            if intake:
                recipient = _recipient_from_form(intake, data.intake_form_id)
                if recipient:
                    return recipient

        if data.patient_id:
            profile = self._profile_repo.get_by_id(data.patient_id)
            if profile and profile["role"] == "patient" and profile.get("email"):
                return Recipient(
                    email=profile["email"],
                    name=_both_names(profile.get("first_name"), profile.get("last_name")) or profile["email"],
                    patient_first_name=profile.get("first_name"),
                    patient_last_name=profile.get("last_name"),
                )
        return None

    def send_form_email(self, data: FormEmailRequest) -> FormEmailSent:
        """
        Send the form link synchronously.

        Raises:
            ValidationFailedError: No recipient could be found, or an intake
                link was requested without a partial form.
            NotFoundError: The partial form for an intake link is gone.
            EmailDeliveryError: Gmail rejected the message.
        """
        recipient = self.resolve_recipient(data)
        if recipient is None:
            raise ValidationFailedError("Could not determine recipient email address")

        if data.form_type == "intake":
            content = self._intake_invitation(data, recipient)
        else:
            form_name, path = FORM_PATHS[data.form_type]
            intake_form_id = recipient.intake_form_id or data.intake_form_id
            link = f"{self._portal_base_url}{path}"
            if intake_form_id:
                link += "?" + urlencode({"intake_form_id": intake_form_id})
            content = email_templates.form_invitation(
                form_name,
                recipient.name,
                recipient.patient_first_name,
                recipient.patient_last_name,
                link,
                filled_by=recipient.filled_by,
            )

        self._email_service.send(recipient.email, content.subject, content.html)
        logger.info(f"Form link sent (form={data.form_type})", extra={"recipient": recipient.email})
        return FormEmailSent(
            message=f"Form email sent successfully to {recipient.email}",
            recipient_email=recipient.email,
        )

    def _intake_invitation(self, data: FormEmailRequest, recipient: Recipient):
        if not data.partial_form_id:
            raise ValidationFailedError("Partial form ID required for intake form")
        partial = self._partial_repo.get_by_id(data.partial_form_id)
        if partial is None or not partial.get("token"):
            raise NotFoundError("Partial form not found")
        return email_templates.partial_intake_invitation(
            mode="minimal",
            filled_by=recipient.filled_by,
            recipient_name=recipient.name,
            recipient_email=recipient.email,
            patient_first_name=recipient.patient_first_name or "",
            patient_last_name=recipient.patient_last_name or "",
            form_link=f"{self._portal_base_url}/intake?token={partial['token']}",
            expires_in_days=self._link_days,
        )
