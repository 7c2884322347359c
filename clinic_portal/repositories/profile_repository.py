"""
Repository for profile database operations.

Profiles are the portal's user accounts (patients and staff).
All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import sqlite3
import logging
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    """Repository for profile CRUD operations."""

    BOOL_COLUMNS = frozenset({"is_online"})

    def add(self, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Insert a new profile and return it.

        Returns:
            The created profile, or None if the email is already taken.
        """
        try:
            return self._insert("profiles", self._stamp(values))
        except sqlite3.IntegrityError:
            return None

    def get_by_id(self, profile_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM profiles WHERE id = ?", (profile_id,))

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup by email."""
        return self._fetch_one(
            "SELECT * FROM profiles WHERE lower(trim(email)) = ?",
            (email.strip().lower(),)
        )

    def get_many(self, profile_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch several profiles at once, keyed by id. Missing ids are omitted."""
        ids = list({pid for pid in profile_ids if pid})
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        rows = self._fetch_all(f"SELECT * FROM profiles WHERE id IN ({placeholders})", ids)
        return {row["id"]: row for row in rows}

    def list_by_roles(self, roles: Iterable[str]) -> List[Dict[str, Any]]:
        """List profiles with any of the given roles, ordered by first name."""
        roles = list(roles)
        placeholders = ", ".join("?" for _ in roles)
        return self._fetch_all(
            f"""
            SELECT * FROM profiles
            WHERE role IN ({placeholders})
            ORDER BY first_name COLLATE NOCASE ASC
            """,
            roles,
        )

    def list_patients_with_email(self) -> List[Dict[str, Any]]:
        """Patient profiles that have a non-empty email (reminder recipients)."""
        return self._fetch_all(
            """
            SELECT id, email, first_name, last_name FROM profiles
            WHERE role = 'patient' AND email IS NOT NULL AND trim(email) != ''
            ORDER BY created_at ASC
            """
        )

    def update(self, profile_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update columns of a profile; None if the profile does not exist."""
        return self._update("profiles", profile_id, self._stamp(values, created=False))

    def search_patients(self, pattern: str, limit: int) -> List[Dict[str, Any]]:
        """
        Patient profiles whose name, first/last name or email matches a LIKE
        pattern (case-insensitive, backslash as the escape character).
        """
        return self._fetch_all(
            r"""
            SELECT id, name, first_name, last_name, email, avatar_url FROM profiles
            WHERE role = 'patient'
              AND (name LIKE ? ESCAPE '\'
                   OR first_name LIKE ? ESCAPE '\'
                   OR last_name LIKE ? ESCAPE '\'
                   OR email LIKE ? ESCAPE '\')
            ORDER BY name IS NULL, name COLLATE NOCASE ASC
            LIMIT ?
            """,
            (pattern, pattern, pattern, pattern, limit),
        )
