"""
Tests for the service agreement lifecycle: creation, activation, signing.
"""
import pytest


@pytest.fixture
def activated_agreement(client, owner, patient, as_user, agreement_payload):
    """An agreement created by the owner for the patient (activated on creation)."""
    agreement_payload["patient_id"] = patient["id"]
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(owner))
    assert response.status_code == 201
    return response.json()["id"]


def test_owner_creates_activated_agreement(client, owner, as_user, activated_agreement, agreement_repo, email_queue):
    """Owner-created agreements start activated; money strings are parsed."""
    stored = agreement_repo.get_by_id(activated_agreement)
    assert stored["is_activated"] is True
    assert stored["activated_at"] is not None
    assert stored["total_program_fee"] == 12500.0
    assert stored["deposit_amount"] == 5000.0
    assert stored["created_by"] == owner["id"]

    assert email_queue.queued[0]["to"] == "jane@example.com"
    assert email_queue.queued[0]["subject"].startswith("Service Agreement Received")


def test_patient_submission_is_inactive_and_linked_to_patient(client, patient, as_user, agreement_payload, agreement_repo):
    """A patient's agreement is tied to their profile and waits for activation."""
    agreement_payload["patient_id"] = None
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient))
    assert response.status_code == 201

    stored = agreement_repo.get_by_id(response.json()["id"])
    assert stored["patient_id"] == patient["id"]
    assert stored["is_activated"] is False


def test_doctor_cannot_submit(client, doctor, as_user, agreement_payload):
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(doctor))
    assert response.status_code == 403
    assert response.json()["error"] == (
        "Unauthorized - Only patients, admins and owners can submit service agreements"
    )


def test_invalid_money_rejected(client, owner, as_user, agreement_payload):
    agreement_payload["total_program_fee"] = "twelve thousand"
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(owner))
    assert response.status_code == 422


def test_patient_resigns_activated_agreement(client, patient, as_user, activated_agreement, agreement_payload, agreement_repo):
    """Re-submitting updates the signature on the activated row."""
    agreement_payload["patient_signature_data"] = "data:image/png;base64,c2lnbmVk"
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient))
    assert response.status_code == 201
    assert response.json()["id"] == activated_agreement

    stored = agreement_repo.get_by_id(activated_agreement)
    assert stored["patient_signature_data"] == "data:image/png;base64,c2lnbmVk"


def test_resign_updates_payment_method_and_upload(client, patient, as_user, activated_agreement, agreement_payload, agreement_repo):
    agreement_payload["payment_method"] = "credit_card"
    agreement_payload["uploaded_file_url"] = "/uploads/receipt.pdf"
    agreement_payload["uploaded_file_name"] = "receipt.pdf"
    response = client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient))
    assert response.status_code == 201
    assert response.json()["id"] == activated_agreement

    stored = agreement_repo.get_by_id(activated_agreement)
    assert stored["payment_method"] == "credit_card"
    assert stored["uploaded_file_url"] == "/uploads/receipt.pdf"
    assert stored["uploaded_file_name"] == "receipt.pdf"


def test_activate_creates_consent_and_emails_patient(
    client, owner, patient, as_user, agreement_payload, consent_repo, email_queue
):
    """Activation activates the agreement and creates the patient's consent form."""
    agreement_id = client.post(
        "/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient)
    ).json()["id"]
    email_queue.queued.clear()

    response = client.post(f"/api/v1/service-agreements/{agreement_id}/activate", headers=as_user(owner))
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["is_activated"] is True

    consent = consent_repo.find_latest_for_patient(patient_id=patient["id"])
    assert consent["is_activated"] is True
    assert consent["facilitator_doctor_name"] == "Dr. Omar Calderon"
    assert consent["email"] == "jane@example.com"

    assert email_queue.queued[0]["subject"].startswith("Complete Your Ibogaine Therapy Consent Form")
    assert "/patient/ibogaine-consent" in email_queue.queued[0]["html"]


def test_activate_unknown_agreement_returns_404(client, owner, as_user):
    response = client.post("/api/v1/service-agreements/missing/activate", headers=as_user(owner))
    assert response.status_code == 404


def test_patient_cannot_activate(client, patient, as_user, activated_agreement):
    response = client.post(f"/api/v1/service-agreements/{activated_agreement}/activate", headers=as_user(patient))
    assert response.status_code == 403


def test_prefill_without_agreement_returns_404(client, patient, as_user):
    response = client.get("/api/v1/service-agreements/prefill", headers=as_user(patient))
    assert response.status_code == 404
    assert response.json()["error"] == (
        "This form is not yet available. Please wait for admin to create and activate it."
    )


def test_prefill_inactive_agreement_returns_409(client, patient, as_user, agreement_payload):
    client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient))
    response = client.get("/api/v1/service-agreements/prefill", headers=as_user(patient))
    assert response.status_code == 409


def test_prefill_returns_activated_agreement(client, patient, as_user, activated_agreement):
    response = client.get("/api/v1/service-agreements/prefill", headers=as_user(patient))
    assert response.status_code == 200
    assert response.json()["data"]["id"] == activated_agreement
    assert response.json()["data"]["number_of_days"] == 14


def test_get_agreement_access(client, owner, patient, other_patient, as_user, activated_agreement):
    """Owners and the patient can read the agreement; other patients cannot."""
    assert client.get(f"/api/v1/service-agreements/{activated_agreement}", headers=as_user(owner)).status_code == 200
    assert client.get(f"/api/v1/service-agreements/{activated_agreement}", headers=as_user(patient)).status_code == 200

    response = client.get(f"/api/v1/service-agreements/{activated_agreement}", headers=as_user(other_patient))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized - You can only view your own forms"


def test_get_inactive_agreement_as_patient_returns_409(client, patient, as_user, agreement_payload):
    agreement_id = client.post(
        "/api/v1/service-agreements", json=agreement_payload, headers=as_user(patient)
    ).json()["id"]
    response = client.get(f"/api/v1/service-agreements/{agreement_id}", headers=as_user(patient))
    assert response.status_code == 409


# =============================================================================
# ADMIN EDITS
# =============================================================================

@pytest.fixture
def admin_fields():
    return {
        "total_program_fee": "$15,000",
        "deposit_amount": "$6,000",
        "deposit_percentage": "40%",
        "remaining_balance": "$9,000",
        "provider_signature_name": "  Dr. Omar Calderon ",
        "provider_signature_date": "2025-04-02T10:00:00Z",
        "number_of_days": "21",
    }


def test_owner_edits_admin_fields(client, owner, as_user, activated_agreement, admin_fields, agreement_repo):
    response = client.patch(
        f"/api/v1/service-agreements/{activated_agreement}/admin-fields", json=admin_fields, headers=as_user(owner)
    )
    assert response.status_code == 200
    assert response.json()["data"]["id"] == activated_agreement

    stored = agreement_repo.get_by_id(activated_agreement)
    assert stored["total_program_fee"] == 15000.0
    assert stored["deposit_amount"] == 6000.0
    assert stored["remaining_balance"] == 9000.0
    assert stored["provider_signature_name"] == "Dr. Omar Calderon"
    assert stored["provider_signature_date"] == "2025-04-02"
    assert stored["number_of_days"] == 21
    # No linked intake, so the program type is kept; the patient's signature is untouched
    assert stored["program_type"] == "addiction"
    assert stored["patient_signature_name"] == "Jane Doe"


def test_admin_edit_takes_program_type_from_intake(
    client, owner, patient, as_user, agreement_payload, admin_fields, intake_repo, agreement_repo
):
    intake = intake_repo.add({
        "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com", "program_type": "neurological",
    })
    agreement_payload.update({"patient_id": patient["id"], "intake_form_id": intake["id"]})
    agreement_id = client.post(
        "/api/v1/service-agreements", json=agreement_payload, headers=as_user(owner)
    ).json()["id"]

    client.patch(f"/api/v1/service-agreements/{agreement_id}/admin-fields", json=admin_fields, headers=as_user(owner))
    assert agreement_repo.get_by_id(agreement_id)["program_type"] == "neurological"


@pytest.mark.parametrize("field, value", [
    ("number_of_days", "0"),
    ("provider_signature_date", "someday"),
    ("provider_signature_name", "   "),
    ("deposit_percentage", "140"),
    ("total_program_fee", "free"),
])
def test_admin_edit_validation(client, owner, as_user, activated_agreement, admin_fields, field, value):
    admin_fields[field] = value
    response = client.patch(
        f"/api/v1/service-agreements/{activated_agreement}/admin-fields", json=admin_fields, headers=as_user(owner)
    )
    assert response.status_code == 422


def test_admin_edit_requires_owner_access(client, doctor, as_user, activated_agreement, admin_fields):
    response = client.patch(
        f"/api/v1/service-agreements/{activated_agreement}/admin-fields", json=admin_fields, headers=as_user(doctor)
    )
    assert response.status_code == 403


def test_admin_edit_unknown_agreement(client, owner, as_user, admin_fields):
    response = client.patch("/api/v1/service-agreements/missing/admin-fields", json=admin_fields, headers=as_user(owner))
    assert response.status_code == 404


def test_upgrade_keeps_signatures(client, owner, as_user, activated_agreement, agreement_repo):
    response = client.patch(
        f"/api/v1/service-agreements/{activated_agreement}/upgrade",
        json={
            "number_of_days": 28,
            "total_program_fee": "$20,000",
            "deposit_amount": "$8,000",
            "deposit_percentage": "40",
            "remaining_balance": "$12,000",
            "payment_method": " credit card ",
        },
        headers=as_user(owner),
    )
    assert response.status_code == 200

    stored = agreement_repo.get_by_id(activated_agreement)
    assert stored["number_of_days"] == 28
    assert stored["total_program_fee"] == 20000.0
    assert stored["payment_method"] == "credit card"
    assert stored["patient_signature_name"] == "Jane Doe"
    assert stored["provider_signature_name"] == "Omar Calderon"


def test_patient_cannot_upgrade(client, patient, as_user, activated_agreement):
    response = client.patch(
        f"/api/v1/service-agreements/{activated_agreement}/upgrade",
        json={
            "number_of_days": 28,
            "total_program_fee": "$20,000",
            "deposit_amount": "$8,000",
            "deposit_percentage": "40",
            "remaining_balance": "$12,000",
            "payment_method": "wire",
        },
        headers=as_user(patient),
    )
    assert response.status_code == 403
