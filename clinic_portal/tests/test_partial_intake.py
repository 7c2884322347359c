"""
Tests for staff-initiated partial intake forms and their emailed links.
"""
from datetime import timedelta

import pytest

from core.datetime_utils import format_iso, utc_now
from services import PartialIntakeService


@pytest.fixture
def minimal_payload():
    return {"mode": "minimal", "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"}


def test_create_minimal_form_emails_patient(client, owner, as_user, minimal_payload, email_service, partial_repo):
    """The invitation goes to the patient and the link carries the token."""
    response = client.post("/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner))
    assert response.status_code == 201
    data = response.json()
    assert data["email_sent"] is True
    assert data["form_link"].endswith(f"/intake?token={data['token']}")

    assert len(email_service.sent) == 1
    sent = email_service.sent[0]
    assert sent["to"] == "jane@example.com"
    assert sent["subject"].startswith("Complete Your Intake Form - Jane Doe")
    assert data["form_link"] in sent["html"]

    stored = partial_repo.get_by_id(data["id"])
    assert stored["created_by"] == owner["id"]
    assert stored["recipient_name"] == "Jane Doe"
    assert stored["email_sent_at"] is not None


def test_create_for_someone_else_emails_filler(client, owner, as_user, minimal_payload, email_service):
    """When someone else fills the form in, they receive the invitation."""
    minimal_payload.update({
        "filled_by": "someone_else",
        "filler_relationship": "Brother",
        "filler_first_name": "Mark",
        "filler_last_name": "Doe",
        "filler_email": "mark@example.com",
        "filler_phone": "(555) 888-9999",
    })
    response = client.post("/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner))
    assert response.status_code == 201

    sent = email_service.sent[0]
    assert sent["to"] == "mark@example.com"
    assert sent["subject"].startswith("Complete Intake Form for Jane Doe")


def test_email_failure_keeps_form(client, owner, as_user, minimal_payload, email_service, partial_repo):
    """A Gmail failure is reported as email_sent=False; the form is kept."""
    email_service.fail = True
    response = client.post("/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner))
    assert response.status_code == 201
    data = response.json()
    assert data["email_sent"] is False

    stored = partial_repo.get_by_id(data["id"])
    assert stored is not None
    assert stored["email_sent_at"] is None


def test_create_prefilled_form(client, owner, as_user, partial_repo):
    """Partial mode stores the pre-filled contact details."""
    response = client.post(
        "/api/v1/partial-intake-forms",
        json={
            "mode": "partial",
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone_number": "(555) 123-4567",
            "city": "Austin",
            "zip_code": "73301",
            "program_type": "addiction",
        },
        headers=as_user(owner),
    )
    assert response.status_code == 201
    stored = partial_repo.get_by_id(response.json()["id"])
    assert stored["mode"] == "partial"
    assert stored["program_type"] == "addiction"
    assert stored["zip_code"] == "73301"


def test_prefilled_form_rejects_bad_zip(client, owner, as_user):
    """Pre-filled ZIP codes must be US ZIPs."""
    response = client.post(
        "/api/v1/partial-intake-forms",
        json={
            "mode": "partial",
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "zip_code": "ABCDE",
        },
        headers=as_user(owner),
    )
    assert response.status_code == 422


def test_unknown_mode_rejected(client, owner, as_user, minimal_payload):
    """Only minimal and partial modes exist."""
    minimal_payload["mode"] = "full"
    response = client.post("/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner))
    assert response.status_code == 422


def test_staff_without_owner_access_cannot_create(client, doctor, as_user, minimal_payload):
    """Creating partial forms needs owner or admin access."""
    response = client.post("/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(doctor))
    assert response.status_code == 403


def test_get_by_token(client, owner, as_user, minimal_payload):
    """The emailed token opens the pre-filled form without a user."""
    created = client.post(
        "/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner)
    ).json()

    response = client.get(f"/api/v1/partial-intake-forms/token/{created['token']}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["first_name"] == "Jane"
    assert data["completed_at"] is None


def test_get_by_unknown_token_returns_404(client):
    response = client.get("/api/v1/partial-intake-forms/token/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "Invalid or expired form link"


def test_get_by_expired_token_returns_410(client, owner, as_user, minimal_payload, temp_db):
    """Links stop working after their expiry."""
    created = client.post(
        "/api/v1/partial-intake-forms", json=minimal_payload, headers=as_user(owner)
    ).json()

    conn = temp_db.get_connection()
    try:
        conn.execute(
            "UPDATE partial_intake_forms SET expires_at = ? WHERE id = ?",
            (format_iso(utc_now() - timedelta(days=1)), created["id"])
        )
        conn.commit()
    finally:
        conn.close()

    response = client.get(f"/api/v1/partial-intake-forms/token/{created['token']}")
    assert response.status_code == 410
    assert response.json()["error"] == "This form link has expired"


def test_link_expiry_uses_configured_days(partial_repo, email_service, owner):
    """expires_at is link_days after creation."""
    from schemas import MinimalPartialIntakeCreate

    service = PartialIntakeService(
        partial_intake_repository=partial_repo,
        email_service=email_service,
        link_days=3,
        portal_base_url="https://portal.test/",
    )
    created = service.create(
        MinimalPartialIntakeCreate(mode="minimal", first_name="Jane", last_name="Doe", email="jane@example.com"),
        created_by=owner["id"],
    )
    assert created.form_link == f"https://portal.test/intake?token={created.token}"

    form = service.get_by_token(created.token)
    remaining = form.expires_at
    from core.datetime_utils import parse_datetime
    delta = parse_datetime(remaining) - utc_now()
    assert timedelta(days=2, hours=23) < delta <= timedelta(days=3)
