"""
Repositories for patient intake forms and partial (staff-initiated) intake forms.

Architecture:
    IntakeFormRepository and PartialIntakeRepository are injected via
    core.dependencies.get_intake_repository() / get_partial_intake_repository().
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories.base import BaseRepository
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)


class IntakeFormRepository(BaseRepository):
    """Data access for the `patient_intake_forms` table."""

    BOOL_COLUMNS = frozenset({"privacy_policy_accepted"})

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert("patient_intake_forms", self._stamp(values))

    def get_by_id(self, form_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM patient_intake_forms WHERE id = ?", (form_id,))

    def find_latest_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Most recent intake whose email matches case-insensitively."""
        return self._fetch_one(
            """
            SELECT * FROM patient_intake_forms
            WHERE lower(trim(email)) = ?
            ORDER BY created_at DESC, rowid DESC LIMIT 1
            """,
            (email.strip().lower(),)
        )

    def find_latest_by_name(self, first_name: str, last_name: str) -> Optional[Dict[str, Any]]:
        """Most recent intake whose first and last name match case-insensitively."""
        return self._fetch_one(
            """
            SELECT * FROM patient_intake_forms
            WHERE lower(trim(first_name)) = ? AND lower(trim(last_name)) = ?
            ORDER BY created_at DESC, rowid DESC LIMIT 1
            """,
            (first_name.strip().lower(), last_name.strip().lower())
        )

    def list_direct(self, limit: int) -> List[Dict[str, Any]]:
        """
        Intake forms submitted directly, newest first.

        Forms that completed a partial intake are excluded; they are listed
        through their partial form instead.
        """
        return self._fetch_all(
            """
            SELECT * FROM patient_intake_forms
            WHERE id NOT IN (
                SELECT completed_form_id FROM partial_intake_forms
                WHERE completed_form_id IS NOT NULL
            )
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (limit,)
        )

    def count_direct(self) -> int:
        row = self._fetch_one(
            """
            SELECT COUNT(*) AS total FROM patient_intake_forms
            WHERE id NOT IN (
                SELECT completed_form_id FROM partial_intake_forms
                WHERE completed_form_id IS NOT NULL
            )
            """
        )
        return row["total"] if row else 0


class PartialIntakeRepository(BaseRepository):
    """Data access for the `partial_intake_forms` table."""

    def add(self, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Insert a partial intake form.

        Returns:
            The created row, or None on a token collision.
        """
        values = dict(values)
        values.setdefault("created_at", now_iso())
        try:
            return self._insert("partial_intake_forms", values)
        except sqlite3.IntegrityError:
            logger.error("Partial intake insert failed (token collision or missing creator)")
            return None

    def get_by_id(self, form_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM partial_intake_forms WHERE id = ?", (form_id,))

    def get_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM partial_intake_forms WHERE token = ?", (token,))

    def mark_email_sent(self, form_id: str) -> None:
        self._execute(
            "UPDATE partial_intake_forms SET email_sent_at = ? WHERE id = ?",
            (now_iso(), form_id)
        )

    def mark_completed(self, form_id: str, intake_form_id: str) -> bool:
        """Link a partial form to the intake that completed it. Returns False if unknown."""
        updated = self._execute(
            """
            UPDATE partial_intake_forms
            SET completed_at = ?, completed_form_id = ?
            WHERE id = ?
            """,
            (now_iso(), intake_form_id, form_id)
        )
        return updated > 0

    def list_recent(self, limit: int) -> List[Dict[str, Any]]:
        """
        Partial forms newest first, each with the creating staff member's
        name and email under `creator_*` columns.
        """
        return self._fetch_all(
            """
            SELECT pif.*,
                   p.first_name AS creator_first_name,
                   p.last_name AS creator_last_name,
                   p.email AS creator_email
            FROM partial_intake_forms pif
            LEFT JOIN profiles p ON p.id = pif.created_by
            ORDER BY pif.created_at DESC, pif.rowid DESC
            LIMIT ?
            """,
            (limit,)
        )

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS total FROM partial_intake_forms")
        return row["total"] if row else 0
