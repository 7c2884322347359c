"""
Repositories for lead (prospective patient) tasks and notes.
"""
import logging
from typing import Any, Dict, List, Optional

from repositories.base import BaseRepository
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)


class LeadTaskRepository(BaseRepository):
    """Data access for the `lead_tasks` table."""

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert("lead_tasks", self._stamp(values))

    def get_by_id(self, task_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM lead_tasks WHERE id = ?", (task_id,))

    def update(self, task_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update("lead_tasks", task_id, self._stamp(values, created=False))

    def delete(self, task_id: str) -> bool:
        return self._execute("DELETE FROM lead_tasks WHERE id = ?", (task_id,)) > 0

    def list_for_lead(self, lead_id: str) -> List[Dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT * FROM lead_tasks
            WHERE lead_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (lead_id,)
        )


class LeadNoteRepository(BaseRepository):
    """Data access for the `lead_notes` table (one row per lead)."""

    def get(self, lead_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM lead_notes WHERE lead_id = ?", (lead_id,))

    def upsert(self, lead_id: str, notes: str, updated_by: Optional[str]) -> Dict[str, Any]:
        self._execute(
            """
            INSERT INTO lead_notes (lead_id, notes, updated_by, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(lead_id) DO UPDATE SET
                notes = excluded.notes,
                updated_by = excluded.updated_by,
                updated_at = excluded.updated_at
            """,
            (lead_id, notes, updated_by, now_iso())
        )
        return self.get(lead_id)
