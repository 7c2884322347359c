"""
Tests for ibogaine consent forms: submission, automatic activation and access.
"""
import uuid

import pytest

from services import ConsentService


def test_submit_without_existing_form_creates_activated_form(client, consent_payload, consent_repo):
    """A consent submitted before any activation is stored already activated."""
    response = client.post("/api/v1/ibogaine-consent-forms", json=consent_payload)
    assert response.status_code == 201

    stored = consent_repo.get_by_id(response.json()["id"])
    assert stored["is_activated"] is True
    assert stored["consent_for_treatment"] is True
    assert stored["signature_name"] == "Jane Doe"


@pytest.mark.parametrize("flag", ["consent_for_treatment", "liability_release", "payment_collection"])
def test_every_consent_section_required(client, consent_payload, flag):
    consent_payload[flag] = False
    response = client.post("/api/v1/ibogaine-consent-forms", json=consent_payload)
    assert response.status_code == 422


def test_submit_signs_activated_form(client, patient, consent_payload, consent_repo, email_queue):
    """Signing updates the activated form and keeps its profile link."""
    service = ConsentService(consent_repository=consent_repo, email_queue=email_queue)
    activated = service.auto_activate(
        patient_id=patient["id"],
        intake_form_id=None,
        email="jane@example.com",
        first_name="Jane",
        last_name="Doe",
    )

    response = client.post("/api/v1/ibogaine-consent-forms", json=consent_payload)
    assert response.status_code == 201
    assert response.json()["id"] == activated["id"]

    stored = consent_repo.get_by_id(activated["id"])
    assert stored["patient_id"] == patient["id"]
    assert stored["signature_data"] == consent_payload["signature_data"]
    assert stored["treatment_date"] == "2025-04-01"


def test_auto_activate_creates_form_and_queues_email(consent_repo, email_queue, patient):
    service = ConsentService(consent_repository=consent_repo, email_queue=email_queue)
    intake_form_id = str(uuid.uuid4())

    form = service.auto_activate(
        patient_id=patient["id"],
        intake_form_id=intake_form_id,
        email="jane@example.com",
        first_name="Jane",
        last_name="Doe",
        phone_number="(555) 123-4567",
    )

    assert form["is_activated"] is True
    assert form["intake_form_id"] == intake_form_id
    assert form["facilitator_doctor_name"] == "Dr. Omar Calderon"

    assert len(email_queue.queued) == 1
    queued = email_queue.queued[0]
    assert queued["to"] == "jane@example.com"
    assert f"/patient/ibogaine-consent?intake_form_id={intake_form_id}" in queued["html"]


def test_auto_activate_reuses_existing_form(consent_repo, email_queue, patient):
    """An inactive form for the patient is activated instead of duplicated."""
    existing = consent_repo.add({"patient_id": patient["id"], "email": "jane@example.com", "is_activated": False})
    service = ConsentService(consent_repository=consent_repo, email_queue=email_queue)

    form = service.auto_activate(
        patient_id=patient["id"], intake_form_id=None, email="jane@example.com",
        first_name="Jane", last_name="Doe",
    )
    assert form["id"] == existing["id"]
    assert form["is_activated"] is True


def test_auto_activate_without_email_sends_nothing(consent_repo, email_queue):
    service = ConsentService(consent_repository=consent_repo, email_queue=email_queue)
    service.auto_activate(patient_id=None, intake_form_id=None, email=None, first_name="Jane", last_name="Doe")
    assert email_queue.queued == []


def test_get_consent_access(client, owner, patient, other_patient, as_user, consent_payload):
    form_id = client.post("/api/v1/ibogaine-consent-forms", json=consent_payload).json()["id"]

    response = client.get(f"/api/v1/ibogaine-consent-forms/{form_id}", headers=as_user(owner))
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["data"]["id"] == form_id

    assert client.get(f"/api/v1/ibogaine-consent-forms/{form_id}", headers=as_user(patient)).status_code == 200

    response = client.get(f"/api/v1/ibogaine-consent-forms/{form_id}", headers=as_user(other_patient))
    assert response.status_code == 403


def test_get_inactive_consent_as_patient_returns_409(client, patient, as_user, consent_repo):
    form = consent_repo.add({"patient_id": patient["id"], "email": "jane@example.com", "is_activated": False})
    response = client.get(f"/api/v1/ibogaine-consent-forms/{form['id']}", headers=as_user(patient))
    assert response.status_code == 409
    assert response.json()["error"] == "This form is not yet activated. Please wait for admin activation."


def test_get_unknown_consent_returns_404(client, owner, as_user):
    response = client.get("/api/v1/ibogaine-consent-forms/missing", headers=as_user(owner))
    assert response.status_code == 404


# =============================================================================
# ADMIN EDITS
# =============================================================================

@pytest.fixture
def activated_consent(consent_repo, email_queue, patient):
    service = ConsentService(consent_repository=consent_repo, email_queue=email_queue)
    return service.auto_activate(
        patient_id=patient["id"], intake_form_id=None, email="jane@example.com", first_name="Jane", last_name="Doe",
    )


def test_owner_edits_consent_admin_fields(client, owner, as_user, activated_consent, consent_repo):
    response = client.patch(
        f"/api/v1/ibogaine-consent-forms/{activated_consent['id']}/admin-fields",
        json={"date_of_birth": "04/12/1985", "address": "12 Palm Street, Austin TX"},
        headers=as_user(owner),
    )
    assert response.status_code == 200
    assert response.json()["data"]["id"] == activated_consent["id"]

    stored = consent_repo.get_by_id(activated_consent["id"])
    assert stored["date_of_birth"] == "1985-04-12"
    assert stored["address"] == "12 Palm Street, Austin TX"
    # Facilitator keeps the clinic default unless overridden
    assert stored["facilitator_doctor_name"] == activated_consent["facilitator_doctor_name"]


def test_admin_edit_overrides_facilitator(client, owner, as_user, activated_consent, consent_repo):
    client.patch(
        f"/api/v1/ibogaine-consent-forms/{activated_consent['id']}/admin-fields",
        json={"date_of_birth": "1985-04-12", "address": "12 Palm Street", "facilitator_doctor_name": "Dr. Ana Ruiz"},
        headers=as_user(owner),
    )
    assert consent_repo.get_by_id(activated_consent["id"])["facilitator_doctor_name"] == "Dr. Ana Ruiz"


def test_consent_admin_edit_rejects_bad_date(client, owner, as_user, activated_consent):
    response = client.patch(
        f"/api/v1/ibogaine-consent-forms/{activated_consent['id']}/admin-fields",
        json={"date_of_birth": "last spring", "address": "12 Palm Street"},
        headers=as_user(owner),
    )
    assert response.status_code == 422


def test_consent_admin_edit_requires_owner_access(client, patient, as_user, activated_consent):
    response = client.patch(
        f"/api/v1/ibogaine-consent-forms/{activated_consent['id']}/admin-fields",
        json={"date_of_birth": "1985-04-12", "address": "12 Palm Street"},
        headers=as_user(patient),
    )
    assert response.status_code == 403


def test_consent_admin_edit_unknown_form(client, owner, as_user):
    response = client.patch(
        f"/api/v1/ibogaine-consent-forms/{uuid.uuid4()}/admin-fields",
        json={"date_of_birth": "1985-04-12", "address": "12 Palm Street"},
        headers=as_user(owner),
    )
    assert response.status_code == 404
