"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
- Marketing registry: Metricool platform and timeline definitions

Authentication (core.auth) is not re-exported here; it depends on
core.dependencies and is imported directly by the routers.
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import (
    get_database,
    get_profile_repository,
    get_email_service,
    get_email_queue,
    get_metricool_service,
)

# Exception classes for consistent error handling
from core.exceptions import (
    PortalError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    ProfileNotFoundError,
    FormNotFoundError,
    ValidationFailedError,
    DuplicateProfileError,
    FormNotActivatedError,
    ExpiredLinkError,
    AlreadyCompletedError,
    DatabaseError,
    UploadError,
    InvalidFileTypeError,
    FileTooLargeError,
    ExternalServiceError,
    EmailDeliveryError,
    MetricoolServiceError,
    setup_exception_handlers,
)

# UTC datetime utilities
from core.datetime_utils import (
    utc_now,
    to_utc,
    parse_datetime,
    format_iso,
    now_iso,
)

# Marketing registry exports
from core.marketing_registry import (
    PlatformDefinition,
    TimelineMetric,
    get_platform,
    list_platforms,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "get_profile_repository",
    "get_email_service",
    "get_email_queue",
    "get_metricool_service",
    # Exceptions
    "PortalError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ProfileNotFoundError",
    "FormNotFoundError",
    "ValidationFailedError",
    "DuplicateProfileError",
    "FormNotActivatedError",
    "ExpiredLinkError",
    "AlreadyCompletedError",
    "DatabaseError",
    "UploadError",
    "InvalidFileTypeError",
    "FileTooLargeError",
    "ExternalServiceError",
    "EmailDeliveryError",
    "MetricoolServiceError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "parse_datetime",
    "format_iso",
    "now_iso",
    # Marketing registry
    "PlatformDefinition",
    "TimelineMetric",
    "get_platform",
    "list_platforms",
]
