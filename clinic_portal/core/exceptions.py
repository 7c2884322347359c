"""
Shared exception classes and error handling utilities for the Clinic Portal API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting ({"success": false, "error": "..."})
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import FormNotFoundError, PermissionDeniedError

    # In service layer - raise domain exceptions
    raise FormNotFoundError(form_type="medical_history", form_id=form_id)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class PortalError(Exception):
    """
    Base exception for all Clinic Portal domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = {k: v for k, v in kwargs.items() if v is not None}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result: Dict[str, Any] = {"success": False, "error": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# AUTH EXCEPTIONS
# =============================================================================

class AuthenticationError(PortalError):
    """Raised when the acting user cannot be identified."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authenticated"


class PermissionDeniedError(PortalError):
    """Raised when the acting user's role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "Permission denied"


# =============================================================================
# LOOKUP EXCEPTIONS
# =============================================================================

class NotFoundError(PortalError):
    """Raised when a requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class ProfileNotFoundError(NotFoundError):
    """Raised when a profile is not found."""

    detail = "Profile not found"


class FormNotFoundError(NotFoundError):
    """Raised when a form submission is not found."""

    detail = "Form not found"

    def __init__(self, form_type: Optional[str] = None, form_id: Optional[str] = None, **kwargs: Any):
        super().__init__(form_type=form_type, form_id=form_id, **kwargs)


class TaskNotFoundError(NotFoundError):
    """Raised when a lead task is not found."""

    detail = "Task not found"


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation does not exist or the user is not in it."""

    detail = "Conversation not found"


class DocumentNotFoundError(NotFoundError):
    """Raised when an uploaded document is not found."""

    detail = "Document not found"


# =============================================================================
# FORM WORKFLOW EXCEPTIONS
# =============================================================================

class ValidationFailedError(PortalError):
    """Raised when input passes schema validation but fails a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid input"


class DuplicateProfileError(PortalError):
    """Raised when a profile with the same email already exists."""

    status_code = status.HTTP_409_CONFLICT
    detail = "A profile with this email already exists"


class FormNotActivatedError(PortalError):
    """Raised when a patient opens a form an admin has not activated yet."""

    status_code = status.HTTP_409_CONFLICT
    detail = "This form is not yet activated. Please wait for admin activation."


class ExpiredLinkError(PortalError):
    """Raised when a partial intake link has passed its expiry."""

    status_code = status.HTTP_410_GONE
    detail = "This form link has expired"


class AlreadyCompletedError(PortalError):
    """Raised when a partial intake link has already been used."""

    status_code = status.HTTP_409_CONFLICT
    detail = "This form has already been completed"


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(PortalError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


# =============================================================================
# UPLOAD EXCEPTIONS
# =============================================================================

class UploadError(PortalError):
    """Base exception for upload-related errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Upload failed"


class InvalidFileTypeError(UploadError):
    """Raised when uploaded file has invalid type."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    detail = "Invalid file type. Only PDF, images, and Word documents are allowed."


class FileTooLargeError(UploadError):
    """Raised when uploaded file exceeds size limit."""

    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    detail = "File size exceeds 10MB limit."


# =============================================================================
# EXTERNAL SERVICE EXCEPTIONS
# =============================================================================

class ExternalServiceError(PortalError):
    """Raised when an external service call fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "External service error"


class EmailDeliveryError(ExternalServiceError):
    """Raised when the Gmail API rejects or fails to send a message."""

    detail = "Failed to send email"


class MetricoolServiceError(ExternalServiceError):
    """Raised when the Metricool API returns an error."""

    detail = "Failed to fetch Metricool metrics"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def portal_exception_handler(
    request: Request,
    exc: PortalError
) -> JSONResponse:
    """
    Handle PortalError exceptions and return consistent JSON responses.

    This handler logs the error and returns {"success": false, "error": ...}.
    """
    logger.warning(
        f"PortalError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions with a generic error response.

    Logs the full exception for debugging but returns a safe error message.
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "An internal server error occurred"}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Call this function during app initialization to enable consistent
    error handling across all endpoints.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(PortalError, portal_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
