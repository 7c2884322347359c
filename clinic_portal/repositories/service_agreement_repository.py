"""
Repository for service agreements (program fees and signatures).
"""
import logging
from typing import Any, Dict, List, Optional

from repositories.base import BaseRepository

logger = logging.getLogger(__name__)

TABLE = "service_agreements"


class ServiceAgreementRepository(BaseRepository):
    """Data access for the `service_agreements` table."""

    BOOL_COLUMNS = frozenset({"is_activated"})

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(TABLE, self._stamp(values))

    def update(self, agreement_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update(TABLE, agreement_id, self._stamp(values, created=False))

    def get_by_id(self, agreement_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT * FROM {TABLE} WHERE id = ?", (agreement_id,))

    def find_latest_for_patient(
        self,
        patient_id: Optional[str],
        email: Optional[str],
        activated_only: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Newest agreement for a patient, matched by profile id, else by email.
        """
        activated_clause = " AND is_activated = 1" if activated_only else ""
        if patient_id:
            found = self._find_latest(TABLE, f"patient_id = ?{activated_clause}", (patient_id,))
            if found:
                return found
        if email:
            return self._find_latest(
                TABLE,
                f"lower(trim(patient_email)) = ?{activated_clause}",
                (email.strip().lower(),),
            )
        return None

    def find_latest_by_intake_id(self, intake_form_id: str) -> Optional[Dict[str, Any]]:
        return self._find_latest(TABLE, "intake_form_id = ?", (intake_form_id,))

    def find_latest_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self._find_latest(TABLE, "lower(trim(patient_email)) = ?", (email.strip().lower(),))

    def list_all(self) -> List[Dict[str, Any]]:
        """Every agreement; used for revenue aggregation."""
        return self._fetch_all(
            f"""
            SELECT id, patient_id, patient_email, total_program_fee, program_type,
                   is_activated, activated_at, created_at
            FROM {TABLE}
            """
        )
