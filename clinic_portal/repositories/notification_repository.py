"""
Repository for in-app user notifications.
"""
import logging
from typing import Any, Dict, List

from repositories.base import BaseRepository
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository):
    """Data access for the `user_notifications` table."""

    def add(self, values: Dict[str, Any]) -> Dict[str, Any]:
        values = dict(values)
        values.setdefault("created_at", now_iso())
        return self._insert("user_notifications", values)

    def list_for_user(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT * FROM user_notifications
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (user_id, limit)
        )

    def mark_read(self, notification_id: str, user_id: str) -> bool:
        """Set read_at on a notification owned by user_id. Returns False if not found."""
        updated = self._execute(
            "UPDATE user_notifications SET read_at = ? WHERE id = ? AND user_id = ?",
            (now_iso(), notification_id, user_id)
        )
        return updated > 0
