"""
Service layer for the patient pipeline (admin view of prospective patients).

Two sources feed the pipeline:
- partial intake forms that staff sent out
- intake forms submitted directly from the public site

Each row carries `form_completion`: how many of the four onboarding forms
(intake, medical history, service agreement, ibogaine consent) exist for
that prospect. The per-row lookups are independent and joined in memory.
"""
import logging
from typing import Any, Dict, List, Optional

from repositories import (
    ConsentFormRepository,
    IntakeFormRepository,
    MedicalHistoryRepository,
    PartialIntakeRepository,
    ServiceAgreementRepository,
)
from schemas.partial_intake import CreatorSummary, FormCompletion, PartialIntakeListItem
from schemas.pipeline import PipelineSummary, PublicIntakeListItem
from services.service_agreement_service import is_patient_signed

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 100
TOTAL_FORMS = 4


class PipelineService:
    """Lists pipeline rows and computes their onboarding form completion."""

    def __init__(
        self,
        partial_intake_repository: PartialIntakeRepository,
        intake_repository: IntakeFormRepository,
        medical_history_repository: MedicalHistoryRepository,
        agreement_repository: ServiceAgreementRepository,
        consent_repository: ConsentFormRepository,
    ):
        self._partial_repo = partial_intake_repository
        self._intake_repo = intake_repository
        self._medical_repo = medical_history_repository
        self._agreement_repo = agreement_repository
        self._consent_repo = consent_repository

    # -------------------------------------------------------------------------
    # Form completion
    # -------------------------------------------------------------------------

    def _find_by_intake_or_email(self, by_intake, by_email, intake_form_id, email):
        found = by_intake(intake_form_id) if intake_form_id else None
        if found is None and email:
            found = by_email(email)
        return found

    def form_completion(
        self,
        intake_form_id: Optional[str],
        email: Optional[str],
        intake_completed: bool,
    ) -> FormCompletion:
        """
        Count completed onboarding forms for one prospect.

        Medical history counts once it exists. The service agreement counts
        only when the patient has signed it; the consent form only when it
        carries a signature.
        """
        completed = 1 if intake_completed else 0

        medical = self._find_by_intake_or_email(
            self._medical_repo.find_latest_by_intake_id,
            self._medical_repo.find_latest_by_email,
            intake_form_id, email,
        )
        if medical:
            completed += 1

        agreement = self._find_by_intake_or_email(
            self._agreement_repo.find_latest_by_intake_id,
            self._agreement_repo.find_latest_by_email,
            intake_form_id, email,
        )
        if is_patient_signed(agreement):
            completed += 1

        consent = self._consent_repo.find_latest_for_patient(intake_form_id=intake_form_id) if intake_form_id else None
        if consent is None and email:
            consent = self._consent_repo.find_latest_for_patient(email=email)
        if consent and (consent.get("signature_data") or "").strip():
            completed += 1

        return FormCompletion(completed=completed, total=TOTAL_FORMS)

    # -------------------------------------------------------------------------
    # Lists
    # -------------------------------------------------------------------------

    def list_partial_forms(self, limit: int = DEFAULT_LIMIT) -> List[PartialIntakeListItem]:
        """Partial forms newest first, each with its creator and form completion."""
        items = []
        for row in self._partial_repo.list_recent(limit):
            creator = None
            if row.get("created_by") and any(
                row.get(k) for k in ("creator_first_name", "creator_last_name", "creator_email")
            ):
                creator = CreatorSummary(
                    first_name=row.pop("creator_first_name"),
                    last_name=row.pop("creator_last_name"),
                    email=row.pop("creator_email"),
                )
            for key in ("creator_first_name", "creator_last_name", "creator_email"):
                row.pop(key, None)

            intake_form_id = row.get("completed_form_id")
            row["form_completion"] = self.form_completion(
                intake_form_id, row.get("email"), intake_completed=bool(intake_form_id)
            )
            items.append(PartialIntakeListItem(**row, creator=creator))
        return items

    def list_public_intake_forms(self, limit: int = DEFAULT_LIMIT) -> List[PublicIntakeListItem]:
        """Direct public intakes (not created through a partial form), newest first."""
        return [
            PublicIntakeListItem(
                **row,
                form_completion=self.form_completion(row["id"], row.get("email"), intake_completed=True),
            )
            for row in self._intake_repo.list_direct(limit)
        ]

    def get_summary(self) -> PipelineSummary:
        partial = self._partial_repo.count()
        public = self._intake_repo.count_direct()
        return PipelineSummary(total_inquiries=partial + public, partial_forms=partial, public_forms=public)
