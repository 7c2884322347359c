"""
Validation utilities for document uploads.

This module contains validation logic for document upload operations.
"""
import logging
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile

from core.exceptions import FileTooLargeError, InvalidFileTypeError, UploadError

logger = logging.getLogger(__name__)

# Allowed document MIME types and extensions
ALLOWED_DOCUMENT_TYPES = {
    "application/pdf": [".pdf"],
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "image/gif": [".gif"],
    "image/webp": [".webp"],
    "application/msword": [".doc"],
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": [".docx"],
}
ALLOWED_EXTENSIONS = {ext for exts in ALLOWED_DOCUMENT_TYPES.values() for ext in exts}

DOCUMENT_CATEGORIES = ("medical_history", "service_agreement", "onboarding", "general")


def validate_file_present(file: UploadFile) -> None:
    """
    Validate that a file is provided in the upload request.

    Raises:
        UploadError: If no file (or no filename) is provided.
    """
    if not file or not file.filename:
        logger.error("No file provided in upload request")
        raise UploadError("No file provided")


def validate_category(category: str) -> str:
    if category not in DOCUMENT_CATEGORIES:
        logger.error(f"Invalid upload category: {category}")
        raise UploadError(
            f"Invalid category. Allowed categories: {', '.join(DOCUMENT_CATEGORIES)}",
            category=category
        )
    return category


def validate_content_type(file: UploadFile) -> str:
    """
    Validate that the file has an allowed content type.

    Returns:
        str: The validated content type.

    Raises:
        InvalidFileTypeError: If content type is missing or not allowed.
    """
    if not file.content_type or file.content_type not in ALLOWED_DOCUMENT_TYPES:
        logger.error(f"Invalid content type: {file.content_type}")
        raise InvalidFileTypeError(content_type=file.content_type)

    return file.content_type


def validate_file_extension(file: UploadFile, content_type: str) -> str:
    """
    Validate that the file extension is allowed and matches the content type.

    Returns:
        str: The validated file extension (with leading dot).

    Raises:
        InvalidFileTypeError: If the extension is missing, not allowed, or
            doesn't match the content type.
    """
    file_extension = Path(file.filename).suffix.lower() if file.filename else ""

    if not file_extension or file_extension not in ALLOWED_EXTENSIONS:
        logger.error(f"Invalid file extension: {file_extension}")
        raise InvalidFileTypeError(extension=file_extension or None)

    if file_extension not in ALLOWED_DOCUMENT_TYPES[content_type]:
        logger.error(f"File extension {file_extension} does not match content type {content_type}")
        raise InvalidFileTypeError(
            "File extension does not match content type",
            extension=file_extension,
            content_type=content_type
        )

    return file_extension


def validate_file_size(file_size: int, max_size: int) -> None:
    """
    Validate that the file size is within allowed limits.

    Raises:
        UploadError: If the file is empty.
        FileTooLargeError: If the file exceeds max_size.
    """
    if file_size == 0:
        logger.error("Empty file uploaded")
        raise UploadError("File is empty")

    if file_size > max_size:
        logger.error(f"File size {file_size} exceeds maximum {max_size}")
        raise FileTooLargeError(
            f"File size exceeds {max_size / (1024 * 1024):.0f}MB limit.",
            size=file_size
        )


def validate_upload_file(file: UploadFile) -> Tuple[str, str]:
    """
    Run the checks that don't need the file body:
    1. File presence
    2. Content type
    3. File extension

    Size is checked by the caller once the body has been read.

    Returns:
        Tuple[str, str]: A tuple of (content_type, file_extension).
    """
    validate_file_present(file)
    content_type = validate_content_type(file)
    file_extension = validate_file_extension(file, content_type)
    return content_type, file_extension
