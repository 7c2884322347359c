"""
Pydantic schemas for document uploads.
"""
from pydantic import BaseModel, Field


class DocumentUploadResponse(BaseModel):
    """Schema for document upload response."""
    success: bool = True
    id: str = Field(..., description="Document id", example="a1b2c3d4-e5f6-7890-abcd-ef1234567890")
    file_name: str = Field(..., description="Original file name", example="blood-panel.pdf")
    storage_path: str = Field(..., description="Path relative to the upload root", example="medical_history/a1b2c3d4-e5f6-7890-abcd-ef1234567890.pdf")
    file_url: str = Field(..., description="API path to download the file", example="/api/v1/documents/a1b2c3d4-e5f6-7890-abcd-ef1234567890/download")
    content_type: str = Field(..., example="application/pdf")
    size: int = Field(..., description="Size in bytes", example=48213)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
                "file_name": "blood-panel.pdf",
                "storage_path": "medical_history/a1b2c3d4-e5f6-7890-abcd-ef1234567890.pdf",
                "file_url": "/api/v1/documents/a1b2c3d4-e5f6-7890-abcd-ef1234567890/download",
                "content_type": "application/pdf",
                "size": 48213
            }
        }


class DocumentResponse(BaseModel):
    id: str
    owner_id: str
    category: str
    file_name: str
    storage_path: str
    content_type: str
    size: int
    created_at: str
