"""
Repository for ibogaine therapy consent forms.
"""
import logging
from typing import Any, Dict, Optional

from repositories.base import BaseRepository

logger = logging.getLogger(__name__)

TABLE = "ibogaine_consent_forms"

CONSENT_FLAGS = (
    "consent_for_treatment",
    "risks_and_benefits",
    "pre_screening_health_assessment",
    "voluntary_participation",
    "confidentiality",
    "liability_release",
    "payment_collection",
)


class ConsentFormRepository(BaseRepository):
    """Data access for the `ibogaine_consent_forms` table."""

    BOOL_COLUMNS = frozenset(CONSENT_FLAGS + ("is_activated",))

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(TABLE, self._stamp(values))

    def update(self, form_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update(TABLE, form_id, self._stamp(values, created=False))

    def get_by_id(self, form_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT * FROM {TABLE} WHERE id = ?", (form_id,))

    def find_latest_for_patient(
        self,
        patient_id: Optional[str] = None,
        intake_form_id: Optional[str] = None,
        email: Optional[str] = None,
        activated_only: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Newest consent form matched by profile id, then intake id, then email.
        """
        activated_clause = " AND is_activated = 1" if activated_only else ""
        lookups = (
            ("patient_id = ?", patient_id),
            ("intake_form_id = ?", intake_form_id),
            ("lower(trim(email)) = ?", email.strip().lower() if email else None),
        )
        for where, value in lookups:
            if not value:
                continue
            found = self._find_latest(TABLE, where + activated_clause, (value,))
            if found:
                return found
        return None
