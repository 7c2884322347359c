"""
Configuration module for the Clinic Portal API service.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import sys
import logging
from pathlib import Path
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Required fields will cause the app to fail fast if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    clinic_portal_db_dir: str = Field(default="data", description="Database directory")
    clinic_portal_db_file: str = Field(default="clinic_portal.db", description="Database filename")
    clinic_portal_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    clinic_portal_host: str = Field(default="0.0.0.0", description="API host")
    clinic_portal_port: int = Field(default=8000, description="API port")
    clinic_portal_reload: bool = Field(default=False, description="Enable hot reload")

    # Upload Configuration
    clinic_portal_upload_dir: str = Field(default="uploads", description="Upload directory")
    clinic_portal_upload_max_size: int = Field(default=10485760, description="Max upload size in bytes (10MB)")

    # Redis & Celery Configuration
    clinic_portal_redis_url: str = Field(default="redis://localhost:6379", description="Redis URL")
    clinic_portal_redis_db: int = Field(default=0, description="Redis database number")
    clinic_portal_celery_task_serializer: str = Field(default="json", description="Celery task serializer")
    clinic_portal_celery_result_serializer: str = Field(default="json", description="Celery result serializer")
    clinic_portal_celery_accept_content: str = Field(default="json", description="Celery accepted content types (comma-separated)")
    clinic_portal_celery_timezone: str = Field(default="UTC", description="Celery timezone")
    clinic_portal_celery_enable_utc: bool = Field(default=True, description="Enable UTC for Celery")

    # Portal Configuration
    portal_base_url: str = Field(default="https://iboga.app", description="Public URL of the portal frontend")
    clinic_name: str = Field(default="Iboga Wellness Institute", description="Clinic name used in emails")
    partial_intake_link_days: int = Field(default=30, description="Days before a partial intake link expires")
    reminder_activation_grace_hours: int = Field(
        default=48,
        description="Hours after activation before an unsigned service agreement triggers a reminder",
    )
    default_facilitator_name: str = Field(
        default="Dr. Omar Calderon",
        description="Facilitator name used when a consent form is auto-created",
    )

    # Gmail API Configuration (Optional - emails are skipped if not set)
    gmail_client_id: str = Field(default="", description="Google OAuth client ID")
    gmail_client_secret: str = Field(default="", description="Google OAuth client secret")
    gmail_refresh_token: str = Field(default="", description="Google OAuth refresh token")
    gmail_sender: str = Field(default="", description="Sender address for outgoing email")
    gmail_timeout: int = Field(default=30, description="Gmail API timeout in seconds")

    # Metricool Configuration (Optional)
    metricool_base_url: str = Field(default="https://app.metricool.com/api", description="Metricool API base URL")
    metricool_user_token: str = Field(default="", description="Metricool API token (X-Mc-Auth)")
    metricool_user_id: str = Field(default="3950725", description="Metricool user ID")
    metricool_blog_id: str = Field(default="5231058", description="Metricool blog (brand) ID")
    metricool_timezone: str = Field(default="America/Indianapolis", description="Timezone for Metricool queries")
    metricool_timeout: int = Field(default=30, description="Metricool timeout in seconds")

    # API Authentication Configuration
    clinic_portal_api_key: str = Field(
        ...,  # Required - no default means fail fast if missing
        description="API key for authenticating requests to the Clinic Portal API",
        min_length=32,  # Enforce minimum key length for security
    )

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """
        Validate required secrets at startup and fail fast with clear error messages.
        Optional integrations only produce warnings.
        """
        errors = []

        if not (self.gmail_refresh_token and self.gmail_client_id and self.gmail_client_secret):
            logger.warning(
                "Gmail API credentials not set - outgoing emails will fail and be logged"
            )

        if not self.metricool_user_token:
            logger.warning(
                "METRICOOL_USER_TOKEN not set - marketing analytics endpoints will return errors"
            )

        if self.partial_intake_link_days < 1:
            errors.append("PARTIAL_INTAKE_LINK_DAYS must be at least 1")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.critical(error_msg)
            sys.exit(1)

        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.clinic_portal_db_dir) / self.clinic_portal_db_file)

    @property
    def celery_broker_url(self) -> str:
        """Get the Celery broker URL with database selection."""
        return f"{self.clinic_portal_redis_url}/{self.clinic_portal_redis_db}"

    @property
    def celery_result_backend(self) -> str:
        """Get the Celery result backend URL with database selection."""
        return f"{self.clinic_portal_redis_url}/{self.clinic_portal_redis_db}"

    @property
    def celery_accept_content_list(self) -> List[str]:
        """Get the Celery accepted content types as a list."""
        return [c.strip() for c in self.clinic_portal_celery_accept_content.split(",")]

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.clinic_portal_db_dir).mkdir(parents=True, exist_ok=True)
        Path(self.clinic_portal_upload_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if required config is missing
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

DATABASE_DIR = settings.clinic_portal_db_dir
DATABASE_FILE = settings.clinic_portal_db_file
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.clinic_portal_db_busy_timeout

API_HOST = settings.clinic_portal_host
API_PORT = settings.clinic_portal_port
API_RELOAD = settings.clinic_portal_reload

UPLOAD_DIR = settings.clinic_portal_upload_dir
UPLOAD_MAX_SIZE = settings.clinic_portal_upload_max_size

REDIS_URL = settings.clinic_portal_redis_url
REDIS_DB = settings.clinic_portal_redis_db
CELERY_BROKER_URL = settings.celery_broker_url
CELERY_RESULT_BACKEND = settings.celery_result_backend
CELERY_TASK_SERIALIZER = settings.clinic_portal_celery_task_serializer
CELERY_RESULT_SERIALIZER = settings.clinic_portal_celery_result_serializer
CELERY_ACCEPT_CONTENT = settings.celery_accept_content_list
CELERY_TIMEZONE = settings.clinic_portal_celery_timezone
CELERY_ENABLE_UTC = settings.clinic_portal_celery_enable_utc

PORTAL_BASE_URL = settings.portal_base_url.rstrip("/")
CLINIC_NAME = settings.clinic_name
PARTIAL_INTAKE_LINK_DAYS = settings.partial_intake_link_days
REMINDER_ACTIVATION_GRACE_HOURS = settings.reminder_activation_grace_hours
DEFAULT_FACILITATOR_NAME = settings.default_facilitator_name

GMAIL_CLIENT_ID = settings.gmail_client_id
GMAIL_CLIENT_SECRET = settings.gmail_client_secret
GMAIL_REFRESH_TOKEN = settings.gmail_refresh_token
GMAIL_SENDER = settings.gmail_sender
GMAIL_TIMEOUT = settings.gmail_timeout

METRICOOL_BASE_URL = settings.metricool_base_url
METRICOOL_USER_TOKEN = settings.metricool_user_token
METRICOOL_USER_ID = settings.metricool_user_id
METRICOOL_BLOG_ID = settings.metricool_blog_id
METRICOOL_TIMEZONE = settings.metricool_timezone
METRICOOL_TIMEOUT = settings.metricool_timeout

API_KEY = settings.clinic_portal_api_key
