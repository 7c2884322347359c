"""
Documents router - file uploads attached to onboarding forms.

Architecture:
    HTTP Request → Router (this file) → UploadService → disk + DocumentRepository
"""
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse

from schemas import DocumentResponse, DocumentUploadResponse
from services import UploadService
from core.auth import CurrentUser, get_current_user, verify_api_key
from core.dependencies import get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/documents",
    tags=["Documents"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=DocumentUploadResponse,
    status_code=201,
    summary="Upload a document",
    description="Upload a PDF, image or Word document via multipart/form-data. Maximum file size is 10MB."
)
async def upload_document(
    file: UploadFile = File(..., description="PDF, JPEG, PNG, GIF, WEBP, DOC or DOCX"),
    category: str = Form("general", description="medical_history, service_agreement, onboarding or general"),
    user: CurrentUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service)
):
    """
    Raises:
    - 400 Bad Request: No file, empty file, or unknown category
    - 413 Payload Too Large: The file exceeds the maximum size
    - 415 Unsupported Media Type: Type not allowed, or extension does not match it
    - 500 Internal Server Error: For file system write failures
    """
    return await upload_service.save_document(file, category, user)


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Get document metadata",
)
async def get_document(
    document_id: str,
    user: CurrentUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service)
):
    return upload_service.get_document(document_id, user)


@router.get(
    "/{document_id}/download",
    summary="Download a document",
    response_class=FileResponse,
)
async def download_document(
    document_id: str,
    user: CurrentUser = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service)
):
    path, document = upload_service.get_download(document_id, user)
    return FileResponse(path, media_type=document.content_type, filename=document.file_name)
