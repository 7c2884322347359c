"""
Base database connection, schema initialization and shared repository helpers.

Optimized for SQLite concurrency with WAL mode and busy_timeout.

IMPORTANT: Database instantiation should be done through the DI layer.
Use core.dependencies.get_database() instead of instantiating directly.
"""
import sqlite3
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence
from pathlib import Path

from core.config import DATABASE_PATH, DATABASE_BUSY_TIMEOUT
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)


# =============================================================================
# SCHEMA
# =============================================================================
# Ids are UUID4 strings. Timestamps are ISO 8601 UTC strings ("...Z").
# Booleans are stored as INTEGER 0/1 and converted back by BaseRepository.

SCHEMA: Sequence[str] = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        email TEXT UNIQUE,
        first_name TEXT,
        last_name TEXT,
        name TEXT,
        role TEXT NOT NULL DEFAULT 'patient',
        avatar_url TEXT,
        phone TEXT,
        designation TEXT,
        is_online INTEGER NOT NULL DEFAULT 0,
        last_seen_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS patient_intake_forms (
        id TEXT PRIMARY KEY,
        filled_by TEXT NOT NULL DEFAULT 'self',
        filler_relationship TEXT,
        filler_first_name TEXT,
        filler_last_name TEXT,
        filler_email TEXT,
        filler_phone TEXT,
        program_type TEXT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        phone_number TEXT,
        date_of_birth TEXT,
        gender TEXT,
        address_line_1 TEXT,
        address_line_2 TEXT,
        city TEXT,
        state TEXT,
        zip_code TEXT,
        country TEXT,
        emergency_contact_first_name TEXT,
        emergency_contact_last_name TEXT,
        emergency_contact_email TEXT,
        emergency_contact_phone TEXT,
        emergency_contact_address TEXT,
        emergency_contact_relationship TEXT,
        privacy_policy_accepted INTEGER NOT NULL DEFAULT 0,
        ip_address TEXT,
        user_agent TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS partial_intake_forms (
        id TEXT PRIMARY KEY,
        token TEXT UNIQUE NOT NULL,
        mode TEXT NOT NULL,
        filled_by TEXT NOT NULL DEFAULT 'self',
        filler_relationship TEXT,
        filler_first_name TEXT,
        filler_last_name TEXT,
        filler_email TEXT,
        filler_phone TEXT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        phone_number TEXT,
        date_of_birth TEXT,
        gender TEXT,
        address TEXT,
        city TEXT,
        state TEXT,
        zip_code TEXT,
        emergency_contact_first_name TEXT,
        emergency_contact_last_name TEXT,
        emergency_contact_email TEXT,
        emergency_contact_phone TEXT,
        emergency_contact_address TEXT,
        emergency_contact_relationship TEXT,
        program_type TEXT,
        recipient_email TEXT NOT NULL,
        recipient_name TEXT,
        created_by TEXT REFERENCES profiles(id),
        email_sent_at TEXT,
        expires_at TEXT NOT NULL,
        completed_at TEXT,
        completed_form_id TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medical_history_forms (
        id TEXT PRIMARY KEY,
        intake_form_id TEXT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        date_of_birth TEXT,
        gender TEXT,
        weight TEXT,
        height TEXT,
        phone_number TEXT,
        email TEXT NOT NULL,
        emergency_contact_name TEXT,
        emergency_contact_phone TEXT,
        primary_care_provider TEXT,
        other_physicians TEXT,
        practitioners_therapists TEXT,
        current_health_status TEXT,
        reason_for_coming TEXT,
        medical_conditions TEXT,
        substance_use_history TEXT,
        family_personal_health_info TEXT,
        pain_stiffness_swelling TEXT,
        metabolic_health_concerns TEXT,
        digestive_health TEXT,
        reproductive_health TEXT,
        hormonal_health TEXT,
        immune_health TEXT,
        food_allergies_intolerance TEXT,
        difficulties_chewing_swallowing TEXT,
        medications_medical_use TEXT,
        medications_mental_health TEXT,
        mental_health_conditions TEXT,
        mental_health_treatment TEXT,
        allergies TEXT,
        previous_psychedelics_experiences TEXT,
        has_physical_examination INTEGER NOT NULL DEFAULT 0,
        physical_examination_records TEXT,
        physical_examination_file_url TEXT,
        physical_examination_file_name TEXT,
        has_cardiac_evaluation INTEGER NOT NULL DEFAULT 0,
        cardiac_evaluation TEXT,
        cardiac_evaluation_file_url TEXT,
        cardiac_evaluation_file_name TEXT,
        has_liver_function_tests INTEGER NOT NULL DEFAULT 0,
        liver_function_tests TEXT,
        liver_function_tests_file_url TEXT,
        liver_function_tests_file_name TEXT,
        is_pregnant INTEGER NOT NULL DEFAULT 0,
        dietary_lifestyle_habits TEXT,
        physical_activity_exercise TEXT,
        signature_data TEXT,
        signature_date TEXT,
        uploaded_file_url TEXT,
        uploaded_file_name TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS service_agreements (
        id TEXT PRIMARY KEY,
        patient_id TEXT REFERENCES profiles(id),
        intake_form_id TEXT,
        patient_first_name TEXT NOT NULL,
        patient_last_name TEXT NOT NULL,
        patient_email TEXT NOT NULL,
        patient_phone_number TEXT,
        total_program_fee REAL NOT NULL DEFAULT 0,
        deposit_amount REAL NOT NULL DEFAULT 0,
        deposit_percentage REAL NOT NULL DEFAULT 0,
        remaining_balance REAL NOT NULL DEFAULT 0,
        payment_method TEXT,
        patient_signature_name TEXT,
        patient_signature_first_name TEXT,
        patient_signature_last_name TEXT,
        patient_signature_date TEXT,
        patient_signature_data TEXT,
        provider_signature_name TEXT,
        provider_signature_first_name TEXT,
        provider_signature_last_name TEXT,
        provider_signature_date TEXT,
        provider_signature_data TEXT,
        uploaded_file_url TEXT,
        uploaded_file_name TEXT,
        program_type TEXT,
        number_of_days INTEGER,
        is_activated INTEGER NOT NULL DEFAULT 0,
        activated_at TEXT,
        created_by TEXT REFERENCES profiles(id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ibogaine_consent_forms (
        id TEXT PRIMARY KEY,
        patient_id TEXT REFERENCES profiles(id),
        intake_form_id TEXT,
        first_name TEXT,
        last_name TEXT,
        date_of_birth TEXT,
        phone_number TEXT,
        email TEXT,
        address TEXT,
        treatment_date TEXT,
        facilitator_doctor_name TEXT,
        consent_for_treatment INTEGER NOT NULL DEFAULT 0,
        risks_and_benefits INTEGER NOT NULL DEFAULT 0,
        pre_screening_health_assessment INTEGER NOT NULL DEFAULT 0,
        voluntary_participation INTEGER NOT NULL DEFAULT 0,
        confidentiality INTEGER NOT NULL DEFAULT 0,
        liability_release INTEGER NOT NULL DEFAULT 0,
        payment_collection INTEGER NOT NULL DEFAULT 0,
        signature_data TEXT,
        signature_date TEXT,
        signature_name TEXT,
        is_activated INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lead_tasks (
        id TEXT PRIMARY KEY,
        lead_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'todo' CHECK (status IN ('todo', 'in_progress', 'done')),
        due_date TEXT,
        assigned_to_id TEXT REFERENCES profiles(id),
        created_by_id TEXT NOT NULL REFERENCES profiles(id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lead_notes (
        lead_id TEXT PRIMARY KEY,
        notes TEXT NOT NULL DEFAULT '',
        updated_by TEXT REFERENCES profiles(id),
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_notifications (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES profiles(id),
        type TEXT NOT NULL,
        title TEXT NOT NULL,
        body TEXT,
        link TEXT,
        entity_type TEXT,
        entity_id TEXT,
        read_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversations (
        id TEXT PRIMARY KEY,
        name TEXT,
        is_group INTEGER NOT NULL DEFAULT 0,
        last_message_at TEXT,
        last_message_preview TEXT,
        created_by TEXT REFERENCES profiles(id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversation_participants (
        conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL REFERENCES profiles(id),
        joined_at TEXT NOT NULL,
        last_read_at TEXT,
        last_read_rowid INTEGER,
        PRIMARY KEY (conversation_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id TEXT PRIMARY KEY,
        conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
        sender_id TEXT NOT NULL REFERENCES profiles(id),
        content TEXT,
        type TEXT NOT NULL DEFAULT 'text' CHECK (type IN ('text', 'image', 'audio', 'file')),
        media_url TEXT,
        reply_to TEXT REFERENCES messages(id),
        is_deleted INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS documents (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES profiles(id),
        category TEXT NOT NULL,
        file_name TEXT NOT NULL,
        storage_path TEXT NOT NULL,
        content_type TEXT NOT NULL,
        size INTEGER NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_intake_email ON patient_intake_forms (lower(email))",
    "CREATE INDEX IF NOT EXISTS idx_medical_intake ON medical_history_forms (intake_form_id)",
    "CREATE INDEX IF NOT EXISTS idx_medical_email ON medical_history_forms (lower(email))",
    "CREATE INDEX IF NOT EXISTS idx_agreement_patient ON service_agreements (patient_id)",
    "CREATE INDEX IF NOT EXISTS idx_agreement_email ON service_agreements (lower(patient_email))",
    "CREATE INDEX IF NOT EXISTS idx_consent_patient ON ibogaine_consent_forms (patient_id)",
    "CREATE INDEX IF NOT EXISTS idx_lead_tasks_lead ON lead_tasks (lead_id)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_user ON user_notifications (user_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages (conversation_id, created_at)",
)


class Database:
    """
    SQLite database connection manager with concurrency optimizations.

    Features:
    - WAL mode for better concurrent read/write performance
    - Busy timeout to handle lock contention gracefully
    - Foreign key constraints enabled by default
    - Rows returned as sqlite3.Row (dict-convertible)

    Usage:
        # Via dependency injection (recommended):
        from core.dependencies import get_database
        db = get_database()

        # Direct instantiation (for testing):
        db = Database(db_path="/tmp/test.db")
    """

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[int] = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Defaults to config DATABASE_PATH.
            busy_timeout: SQLite busy timeout in milliseconds. Defaults to config value.
        """
        self.db_path = db_path or DATABASE_PATH
        self.busy_timeout = busy_timeout if busy_timeout is not None else DATABASE_BUSY_TIMEOUT

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout}")
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row

    def _init_db(self) -> None:
        """Create tables and indexes, and enable WAL mode if not already enabled."""
        conn = sqlite3.connect(self.db_path)
        self._configure_connection(conn)
        cursor = conn.cursor()

        # WAL mode persists in the database file, so this only needs to run once
        cursor.execute("PRAGMA journal_mode = WAL")
        result = cursor.fetchone()
        if result and result[0].lower() == 'wal':
            logger.info(f"SQLite WAL mode enabled for {self.db_path}")
        else:
            logger.warning(f"Failed to enable WAL mode, current mode: {result[0] if result else None}")

        for statement in SCHEMA:
            cursor.execute(statement)

        conn.commit()
        conn.close()

        logger.info(
            f"Database initialized: {self.db_path} "
            f"(busy_timeout={self.busy_timeout}ms, tables={sum(1 for s in SCHEMA if 'CREATE TABLE' in s)})"
        )

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a new database connection with concurrency settings.

        Returns:
            sqlite3.Connection: A new connection with foreign keys enabled,
                busy timeout set and sqlite3.Row as row factory.
        """
        conn = sqlite3.connect(self.db_path)
        self._configure_connection(conn)
        return conn


def new_id() -> str:
    """Generate a primary key."""
    return str(uuid.uuid4())


class BaseRepository:
    """
    Shared helpers for table repositories.

    Column names passed to _insert/_update always come from code (schema
    field names), never from request data.
    """

    # Columns stored as INTEGER 0/1 that should be returned as bool
    BOOL_COLUMNS: frozenset = frozenset()

    def __init__(self, db: Database):
        """
        Args:
            db: Database instance for data access.
                Injected via the core.dependencies.get_*_repository() functions.
        """
        self._db = db

    def _to_dict(self, row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        data = dict(row)
        for column in self.BOOL_COLUMNS:
            if column in data and data[column] is not None:
                data[column] = bool(data[column])
        return data

    def _fetch_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            row = conn.execute(sql, tuple(params)).fetchone()
            return self._to_dict(row)
        finally:
            conn.close()

    def _fetch_all(self, sql: str, params: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [self._to_dict(row) for row in rows]
        finally:
            conn.close()

    def _find_latest(self, table: str, where: str, params: Iterable[Any] = ()) -> Optional[Dict[str, Any]]:
        """Newest row of a table matching a WHERE clause."""
        return self._fetch_one(
            f"SELECT * FROM {table} WHERE {where} ORDER BY created_at DESC, rowid DESC LIMIT 1",
            params,
        )

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Run a write statement and return the affected row count."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(sql, tuple(params))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def _insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a row and return it as stored.

        Generates `id` when absent. Uses a single connection so the
        read-back sees the insert.
        """
        values = dict(values)
        values.setdefault("id", new_id())
        columns = ", ".join(values.keys())
        placeholders = ", ".join("?" for _ in values)

        conn = self._db.get_connection()
        try:
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (values["id"],)).fetchone()
            conn.commit()
            return self._to_dict(row)
        finally:
            conn.close()

    def _update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update columns of one row by id and return the updated row (None if absent)."""
        if not values:
            return self._fetch_one(f"SELECT * FROM {table} WHERE id = ?", (row_id,))
        assignments = ", ".join(f"{column} = ?" for column in values)

        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*values.values(), row_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,)).fetchone()
            conn.commit()
            return self._to_dict(row)
        finally:
            conn.close()

    @staticmethod
    def _stamp(values: Dict[str, Any], created: bool = True) -> Dict[str, Any]:
        """Add created_at/updated_at timestamps."""
        now = now_iso()
        stamped = dict(values)
        if created:
            stamped.setdefault("created_at", now)
        stamped["updated_at"] = now
        return stamped
