"""
Tests for document uploads.
Covers storage, validation failures and access to stored documents.
"""
from io import BytesIO
from pathlib import Path

import pytest

from core.exceptions import FileTooLargeError, UploadError
from services.validators import validate_category, validate_file_size


def create_test_pdf(size: int = 256) -> BytesIO:
    """Create a small PDF-looking payload in memory."""
    return BytesIO(b"%PDF-1.4\n" + b"0" * (size - 9))


def upload(client, user_headers, name="labs.pdf", content_type="application/pdf", data=None, category="medical_history"):
    data = data if data is not None else create_test_pdf()
    return client.post(
        "/api/v1/documents",
        files={"file": (name, data, content_type)},
        data={"category": category},
        headers=user_headers,
    )


# =============================================================================
# SUCCESS CASES
# =============================================================================

def test_upload_pdf(client, patient, as_user, upload_service):
    response = upload(client, as_user(patient))
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["file_name"] == "labs.pdf"
    assert data["content_type"] == "application/pdf"
    assert data["size"] == 256
    assert data["storage_path"] == f"medical_history/{data['id']}.pdf"
    assert data["file_url"] == f"/api/v1/documents/{data['id']}/download"

    stored = Path(upload_service.upload_dir) / data["storage_path"]
    assert stored.is_file()
    assert stored.read_bytes().startswith(b"%PDF")


def test_upload_defaults_to_general_category(client, patient, as_user):
    response = client.post(
        "/api/v1/documents",
        files={"file": ("scan.png", BytesIO(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32), "image/png")},
        headers=as_user(patient),
    )
    assert response.status_code == 201
    assert response.json()["storage_path"].startswith("general/")


def test_upload_requires_user(client):
    response = client.post(
        "/api/v1/documents",
        files={"file": ("labs.pdf", create_test_pdf(), "application/pdf")},
    )
    assert response.status_code == 401


# =============================================================================
# VALIDATION FAILURES
# =============================================================================

def test_unknown_category_rejected(client, patient, as_user):
    response = upload(client, as_user(patient), category="taxes")
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid category")


def test_disallowed_type_rejected(client, patient, as_user):
    response = upload(client, as_user(patient), name="notes.txt", content_type="text/plain")
    assert response.status_code == 415


def test_extension_must_match_type(client, patient, as_user):
    response = upload(client, as_user(patient), name="labs.png", content_type="application/pdf")
    assert response.status_code == 415
    assert response.json()["error"] == "File extension does not match content type"


def test_empty_file_rejected(client, patient, as_user):
    response = upload(client, as_user(patient), data=BytesIO(b""))
    assert response.status_code == 400
    assert response.json()["error"] == "File is empty"


def test_oversized_file_rejected(client, patient, as_user, upload_service):
    response = upload(client, as_user(patient), data=create_test_pdf(size=upload_service.max_size + 1))
    assert response.status_code == 413


def test_validate_category_accepts_known_categories():
    for category in ("medical_history", "service_agreement", "onboarding", "general"):
        assert validate_category(category) == category


def test_validate_file_size_limits():
    validate_file_size(10, max_size=10)
    with pytest.raises(UploadError):
        validate_file_size(0, max_size=10)
    with pytest.raises(FileTooLargeError):
        validate_file_size(11, max_size=10)


# =============================================================================
# ACCESS
# =============================================================================

def test_owner_can_read_and_download(client, patient, as_user):
    document_id = upload(client, as_user(patient)).json()["id"]

    response = client.get(f"/api/v1/documents/{document_id}", headers=as_user(patient))
    assert response.status_code == 200
    assert response.json()["owner_id"] == patient["id"]
    assert response.json()["category"] == "medical_history"

    response = client.get(f"/api/v1/documents/{document_id}/download", headers=as_user(patient))
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_staff_can_read_patient_documents(client, patient, doctor, as_user):
    document_id = upload(client, as_user(patient)).json()["id"]
    response = client.get(f"/api/v1/documents/{document_id}", headers=as_user(doctor))
    assert response.status_code == 200


def test_other_patient_cannot_read(client, patient, other_patient, as_user):
    document_id = upload(client, as_user(patient)).json()["id"]

    response = client.get(f"/api/v1/documents/{document_id}", headers=as_user(other_patient))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized - You can only view your own documents"

    response = client.get(f"/api/v1/documents/{document_id}/download", headers=as_user(other_patient))
    assert response.status_code == 403


def test_unknown_document_returns_404(client, patient, as_user):
    response = client.get("/api/v1/documents/missing", headers=as_user(patient))
    assert response.status_code == 404
    assert response.json()["error"] == "Document not found"


def test_missing_file_on_disk_returns_404(client, patient, as_user, upload_service):
    data = upload(client, as_user(patient)).json()
    (Path(upload_service.upload_dir) / data["storage_path"]).unlink()

    response = client.get(f"/api/v1/documents/{data['id']}/download", headers=as_user(patient))
    assert response.status_code == 404
