"""
Validation utilities for services.
"""
from services.validators.upload_validator import (
    validate_upload_file,
    validate_file_size,
    validate_file_present,
    validate_category,
    validate_content_type,
    validate_file_extension,
    ALLOWED_DOCUMENT_TYPES,
    ALLOWED_EXTENSIONS,
    DOCUMENT_CATEGORIES,
)

__all__ = [
    "validate_upload_file",
    "validate_file_size",
    "validate_file_present",
    "validate_category",
    "validate_content_type",
    "validate_file_extension",
    "ALLOWED_DOCUMENT_TYPES",
    "ALLOWED_EXTENSIONS",
    "DOCUMENT_CATEGORIES",
]
