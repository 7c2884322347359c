"""
Repository for uploaded document metadata.
"""
from typing import Any, Dict, Optional

from repositories.base import BaseRepository
from core.datetime_utils import now_iso


class DocumentRepository(BaseRepository):
    """Data access for the `documents` table."""

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values = dict(values)
        values.setdefault("created_at", now_iso())
        return self._insert("documents", values)

    def get_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM documents WHERE id = ?", (document_id,))
