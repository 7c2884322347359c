"""
Service for handling document uploads.

Files are stored on disk under {upload_dir}/{category}/{uuid}{ext} and a
`documents` row records who uploaded what.
"""
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Tuple

from fastapi import UploadFile

from repositories import DocumentRepository
from schemas import DocumentResponse, DocumentUploadResponse
from services.validators.upload_validator import validate_category, validate_file_size, validate_upload_file
from core.auth import CurrentUser
from core.config import UPLOAD_DIR, UPLOAD_MAX_SIZE
from core.exceptions import DocumentNotFoundError, PermissionDeniedError, UploadError

logger = logging.getLogger(__name__)


class UploadService:
    """Service for storing and serving uploaded documents."""

    def __init__(
        self,
        document_repository: DocumentRepository,
        upload_dir: str = UPLOAD_DIR,
        max_size: int = UPLOAD_MAX_SIZE,
    ):
        """
        Initialize the upload service.

        Args:
            document_repository: Data access for document metadata.
            upload_dir: Directory where uploaded files will be stored
            max_size: Maximum allowed file size in bytes
        """
        self._repo = document_repository
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save_document(self, file: UploadFile, category: str, owner: CurrentUser) -> DocumentUploadResponse:
        """
        Validate, store and record an uploaded document.

        This method:
        1. Validates the category, content type and extension
        2. Reads the body and validates its size
        3. Writes the file under its category directory
        4. Records a `documents` row

        Raises:
            UploadError: Bad category, empty file or disk failure.
            InvalidFileTypeError: Type or extension not allowed.
            FileTooLargeError: The file exceeds max_size.
        """
        validate_category(category)
        content_type, file_extension = validate_upload_file(file)

        file_content = await file.read()
        file_size = len(file_content)
        validate_file_size(file_size, self.max_size)

        document_id = str(uuid.uuid4())
        storage_path = f"{category}/{document_id}{file_extension}"
        upload_path = self.upload_dir / storage_path

        try:
            upload_path.parent.mkdir(parents=True, exist_ok=True)
            with open(upload_path, "wb") as f:
                f.write(file_content)
            logger.info(f"Successfully uploaded file: {storage_path} (size: {file_size} bytes)")
        except OSError as e:
            logger.error(f"Failed to write file to disk: {str(e)}")
            raise UploadError("Failed to save file to disk", status_code=500)

        document = self._repo.add({
            "id": document_id,
            "owner_id": owner.id,
            "category": category,
            "file_name": file.filename,
            "storage_path": storage_path,
            "content_type": content_type,
            "size": file_size,
        })

        return DocumentUploadResponse(
            id=document["id"],
            file_name=document["file_name"],
            storage_path=document["storage_path"],
            file_url=f"/api/v1/documents/{document['id']}/download",
            content_type=document["content_type"],
            size=document["size"],
        )

    def _get_visible(self, document_id: str, user: CurrentUser) -> Dict[str, Any]:
        document = self._repo.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id=document_id)
        if document["owner_id"] != user.id and not user.is_staff:
            raise PermissionDeniedError("Unauthorized - You can only view your own documents")
        return document

    def get_document(self, document_id: str, user: CurrentUser) -> DocumentResponse:
        """
        Raises:
            DocumentNotFoundError: Unknown id.
            PermissionDeniedError: Neither the uploader nor staff.
        """
        return DocumentResponse(**self._get_visible(document_id, user))

    def get_download(self, document_id: str, user: CurrentUser) -> Tuple[Path, DocumentResponse]:
        """
        Path of the stored file and its metadata.

        Raises:
            DocumentNotFoundError: Unknown id, or the file is gone from disk.
            PermissionDeniedError: Neither the uploader nor staff.
        """
        document = self._get_visible(document_id, user)
        path = self.upload_dir / document["storage_path"]
        if not path.is_file():
            logger.error(f"Stored file missing for document {document_id}: {path}")
            raise DocumentNotFoundError(document_id=document_id)
        return path, DocumentResponse(**document)
