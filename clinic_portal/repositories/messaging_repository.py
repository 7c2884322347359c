"""
Repository for chat conversations, participants and messages.

Unread counts are computed in SQL per conversation: messages from other
participants, not deleted, inserted after the newest message the reader had
seen when they last marked the conversation read. Message rowids are
compared rather than timestamps, which can tie within a millisecond.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import BaseRepository, new_id
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

UNREAD_COUNT_SQL = """
    SELECT COUNT(*) FROM messages m
    WHERE m.conversation_id = cp.conversation_id
      AND m.sender_id != cp.user_id
      AND m.is_deleted = 0
      AND (cp.last_read_rowid IS NULL OR m.rowid > cp.last_read_rowid)
"""


class MessagingRepository(BaseRepository):
    """Data access for `conversations`, `conversation_participants` and `messages`."""

    BOOL_COLUMNS = frozenset({"is_group", "is_deleted"})

    # -------------------------------------------------------------------------
    # Conversations
    # -------------------------------------------------------------------------

    def create_conversation(
        self,
        created_by: str,
        participant_ids: Iterable[str],
        name: Optional[str] = None,
        is_group: bool = False,
    ) -> Dict[str, Any]:
        """Insert a conversation and its participants in one transaction."""
        now = now_iso()
        conversation_id = new_id()

        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO conversations (id, name, is_group, created_by, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (conversation_id, name, int(is_group), created_by, now, now)
            )
            conn.executemany(
                """
                INSERT INTO conversation_participants (conversation_id, user_id, joined_at)
                VALUES (?, ?, ?)
                """,
                [(conversation_id, user_id, now) for user_id in participant_ids]
            )
            conn.commit()
        finally:
            conn.close()

        return self.get_conversation(conversation_id)

    def get_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM conversations WHERE id = ?", (conversation_id,))

    def find_direct_conversation(self, user_a: str, user_b: str) -> Optional[Dict[str, Any]]:
        """The non-group conversation whose participants are exactly user_a and user_b."""
        return self._fetch_one(
            """
            SELECT c.* FROM conversations c
            WHERE c.is_group = 0
              AND EXISTS (SELECT 1 FROM conversation_participants
                          WHERE conversation_id = c.id AND user_id = ?)
              AND EXISTS (SELECT 1 FROM conversation_participants
                          WHERE conversation_id = c.id AND user_id = ?)
              AND (SELECT COUNT(*) FROM conversation_participants
                   WHERE conversation_id = c.id) = 2
            ORDER BY c.created_at ASC, c.rowid ASC
            LIMIT 1
            """,
            (user_a, user_b)
        )

    def is_participant(self, conversation_id: str, user_id: str) -> bool:
        row = self._fetch_one(
            """
            SELECT 1 AS found FROM conversation_participants
            WHERE conversation_id = ? AND user_id = ?
            """,
            (conversation_id, user_id)
        )
        return row is not None

    def list_user_conversations(self, user_id: str, limit: int, offset: int) -> List[Dict[str, Any]]:
        """
        Conversations the user participates in, most recent activity first,
        each with the user's `unread_count`.
        """
        return self._fetch_all(
            f"""
            SELECT c.*, ({UNREAD_COUNT_SQL}) AS unread_count
            FROM conversations c
            JOIN conversation_participants cp
              ON cp.conversation_id = c.id AND cp.user_id = ?
            ORDER BY COALESCE(c.last_message_at, c.created_at) DESC, c.rowid DESC
            LIMIT ? OFFSET ?
            """,
            (user_id, limit, offset)
        )

    def list_participants(self, conversation_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Participants of the given conversations, joined with a profile summary."""
        ids = list(conversation_ids)
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        return self._fetch_all(
            f"""
            SELECT cp.conversation_id, cp.user_id, cp.joined_at, cp.last_read_at,
                   p.first_name, p.last_name, p.email, p.role, p.avatar_url, p.is_online
            FROM conversation_participants cp
            LEFT JOIN profiles p ON p.id = cp.user_id
            WHERE cp.conversation_id IN ({placeholders})
            ORDER BY cp.joined_at ASC, cp.rowid ASC
            """,
            ids
        )

    def mark_read(self, conversation_id: str, user_id: str) -> bool:
        updated = self._execute(
            """
            UPDATE conversation_participants
            SET last_read_at = ?,
                last_read_rowid = (SELECT COALESCE(MAX(rowid), 0) FROM messages WHERE conversation_id = ?)
            WHERE conversation_id = ? AND user_id = ?
            """,
            (now_iso(), conversation_id, conversation_id, user_id)
        )
        return updated > 0

    def total_unread(self, user_id: str) -> int:
        row = self._fetch_one(
            f"""
            SELECT COALESCE(SUM(({UNREAD_COUNT_SQL})), 0) AS total
            FROM conversation_participants cp
            WHERE cp.user_id = ?
            """,
            (user_id,)
        )
        return row["total"] if row else 0

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    def add_message(self, values: Dict[str, Any], preview: str) -> Dict[str, Any]:
        """Insert a message and bump the conversation's last-message fields."""
        values = self._stamp(values)
        values.setdefault("id", new_id())
        columns = ", ".join(values.keys())
        placeholders = ", ".join("?" for _ in values)

        conn = self._db.get_connection()
        try:
            conn.execute(
                f"INSERT INTO messages ({columns}) VALUES ({placeholders})",
                tuple(values.values())
            )
            conn.execute(
                """
                UPDATE conversations
                SET last_message_at = ?, last_message_preview = ?, updated_at = ?
                WHERE id = ?
                """,
                (values["created_at"], preview, values["created_at"], values["conversation_id"])
            )
            conn.commit()
        finally:
            conn.close()

        return self.get_message(values["id"])

    def get_message(self, message_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM messages WHERE id = ?", (message_id,))

    def list_messages(
        self,
        conversation_id: str,
        limit: int,
        before: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        A page of non-deleted messages, oldest to newest.

        The page holds the newest `limit` messages created before `before`
        (or the newest overall).
        """
        clauses = ["conversation_id = ?", "is_deleted = 0"]
        params: List[Any] = [conversation_id]
        if before:
            clauses.append("created_at < ?")
            params.append(before)
        params.append(limit)

        rows = self._fetch_all(
            f"""
            SELECT * FROM messages
            WHERE {" AND ".join(clauses)}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            params
        )
        rows.reverse()
        return rows

    def soft_delete_message(self, message_id: str) -> Optional[Dict[str, Any]]:
        return self._update(
            "messages", message_id, {"is_deleted": 1, "updated_at": now_iso()}
        )
