"""
Repository for medical history form submissions.
"""
import logging
from typing import Any, Dict, Optional

from repositories.base import BaseRepository

logger = logging.getLogger(__name__)

TABLE = "medical_history_forms"


class MedicalHistoryRepository(BaseRepository):
    """Data access for the `medical_history_forms` table."""

    BOOL_COLUMNS = frozenset({
        "has_physical_examination",
        "has_cardiac_evaluation",
        "has_liver_function_tests",
        "is_pregnant",
    })

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(TABLE, self._stamp(values))

    def get_by_id(self, form_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT * FROM {TABLE} WHERE id = ?", (form_id,))

    def find_latest_by_intake_id(self, intake_form_id: str) -> Optional[Dict[str, Any]]:
        return self._find_latest(TABLE, "intake_form_id = ?", (intake_form_id,))

    def find_latest_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self._find_latest(TABLE, "lower(trim(email)) = ?", (email.strip().lower(),))

    def find_latest_by_name(self, first_name: str, last_name: str) -> Optional[Dict[str, Any]]:
        return self._find_latest(
            TABLE,
            "lower(trim(first_name)) = ? AND lower(trim(last_name)) = ?",
            (first_name.strip().lower(), last_name.strip().lower()),
        )
