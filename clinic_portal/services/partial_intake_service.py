"""
Service layer for partial (staff-initiated) intake forms.

Staff pre-fill part of an intake and email a tokenized link to the patient
or to whoever fills the form in on their behalf.
"""
import logging
import uuid
from typing import Union

from repositories import PartialIntakeRepository
from schemas.partial_intake import (
    MinimalPartialIntakeCreate,
    PartialIntakeCreated,
    PartialIntakeResponse,
    PrefilledPartialIntakeCreate,
)
from services import email_templates
from services.email_service import EmailService
from core.config import PARTIAL_INTAKE_LINK_DAYS, PORTAL_BASE_URL
from core.datetime_utils import add_days, format_iso, parse_datetime, utc_now
from core.exceptions import (
    AlreadyCompletedError,
    DatabaseError,
    EmailDeliveryError,
    ExpiredLinkError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

INVALID_LINK = "Invalid or expired form link"


class PartialIntakeService:
    """Creates partial intake forms and resolves their links."""

    def __init__(
        self,
        partial_intake_repository: PartialIntakeRepository,
        email_service: EmailService,
        link_days: int = PARTIAL_INTAKE_LINK_DAYS,
        portal_base_url: str = PORTAL_BASE_URL,
    ):
        """
        Args:
            partial_intake_repository: Data access for partial forms.
            email_service: Sends the invitation synchronously so the caller
                           learns whether it was delivered.
            link_days: Days until the emailed link expires.
            portal_base_url: Frontend root used to build the form link.
        """
        self._repo = partial_intake_repository
        self._email_service = email_service
        self._link_days = link_days
        self._portal_base_url = portal_base_url.rstrip("/")

    def create(
        self,
        data: Union[MinimalPartialIntakeCreate, PrefilledPartialIntakeCreate],
        created_by: str,
    ) -> PartialIntakeCreated:
        """
        Store the partial form and email the invitation.

        An email failure is logged and reported as `email_sent=False`; the
        form is kept either way.
        """
        is_self = data.filled_by == "self"
        if is_self:
            recipient_email = data.email
            recipient_name = f"{data.first_name} {data.last_name}"
        else:
            recipient_email = data.filler_email or data.email
            recipient_name = f"{data.filler_first_name} {data.filler_last_name}"

        token = str(uuid.uuid4())
        values = data.model_dump()
        values.update({
            "token": token,
            "recipient_email": recipient_email,
            "recipient_name": recipient_name.strip(),
            "created_by": created_by,
            "expires_at": format_iso(add_days(utc_now(), self._link_days)),
        })

        form = self._repo.add(values)
        if form is None:
            raise DatabaseError(operation="create partial intake form")

        form_link = f"{self._portal_base_url}/intake?token={token}"
        content = email_templates.partial_intake_invitation(
            mode=data.mode,
            filled_by=data.filled_by,
            recipient_name=form["recipient_name"],
            recipient_email=recipient_email,
            patient_first_name=data.first_name,
            patient_last_name=data.last_name,
            form_link=form_link,
            expires_in_days=self._link_days,
        )

        email_sent = False
        try:
            self._email_service.send(recipient_email, content.subject, content.html)
            self._repo.mark_email_sent(form["id"])
            email_sent = True
        except EmailDeliveryError as e:
            logger.error(f"Partial intake {form['id']} created but invitation email failed: {e.detail}")

        logger.info(f"Partial intake created (id={form['id']}, mode={data.mode}, email_sent={email_sent})")
        return PartialIntakeCreated(id=form["id"], token=token, form_link=form_link, email_sent=email_sent)

    def get_by_token(self, token: str) -> PartialIntakeResponse:
        """
        Resolve an emailed link.

        Raises:
            NotFoundError: Unknown token.
            ExpiredLinkError: The link is past its expiry.
            AlreadyCompletedError: The intake was already submitted.
        """
        form = self._repo.get_by_token(token)
        if form is None:
            raise NotFoundError(INVALID_LINK)
        if parse_datetime(form["expires_at"]) < utc_now():
            raise ExpiredLinkError()
        if form.get("completed_at"):
            raise AlreadyCompletedError()
        return PartialIntakeResponse(**form)
