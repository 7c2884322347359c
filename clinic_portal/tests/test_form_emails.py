"""
Tests for re-sending onboarding form links from the pipeline.
"""
import uuid

import pytest

from core.datetime_utils import add_days, format_iso, utc_now

URL = "/api/v1/form-emails"


@pytest.fixture
def intake(intake_repo):
    return intake_repo.add({"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"})


@pytest.fixture
def filler_intake(intake_repo):
    return intake_repo.add({
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "filled_by": "someone_else",
        "filler_relationship": "spouse",
        "filler_first_name": "John",
        "filler_last_name": "Doe",
        "filler_email": "john@example.com",
    })


@pytest.fixture
def partial(partial_repo, owner, intake):
    return partial_repo.add({
        "token": "7f1c2a9e-5b4d-4e0a-8c3f-2d6b1e9a7c40",
        "mode": "minimal",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "recipient_email": "jane.doe@example.org",
        "recipient_name": "Jane Doe",
        "created_by": owner["id"],
        "expires_at": format_iso(add_days(utc_now(), 7)),
        "completed_form_id": intake["id"],
    })


def test_medical_link_goes_to_patient(client, doctor, as_user, intake, email_service):
    response = client.post(
        URL, json={"form_type": "medical", "intake_form_id": intake["id"]}, headers=as_user(doctor)
    )
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Form email sent successfully to jane@example.com",
        "recipient_email": "jane@example.com",
    }

    sent = email_service.sent[0]
    assert sent["to"] == "jane@example.com"
    assert sent["subject"].startswith("Complete Your Medical Health History Form")
    assert f"/medical-history?intake_form_id={intake['id']}" in sent["html"]
    assert "Hello Jane Doe," in sent["html"]


def test_link_goes_to_filler_when_someone_else_fills_in(client, owner, as_user, filler_intake, email_service):
    response = client.post(
        URL, json={"form_type": "service", "intake_form_id": filler_intake["id"]}, headers=as_user(owner)
    )
    assert response.status_code == 200
    assert response.json()["recipient_email"] == "john@example.com"

    sent = email_service.sent[0]
    assert sent["subject"].startswith("Complete Service Agreement Form for Jane Doe")
    assert "Hello John Doe," in sent["html"]
    assert f"/patient/service-agreement?intake_form_id={filler_intake['id']}" in sent["html"]


def test_partial_form_takes_precedence(client, doctor, as_user, partial, intake, email_service):
    response = client.post(
        URL,
        json={"form_type": "ibogaine", "partial_form_id": partial["id"], "intake_form_id": intake["id"]},
        headers=as_user(doctor),
    )
    assert response.status_code == 200
    assert response.json()["recipient_email"] == "jane.doe@example.org"
    assert f"/patient/ibogaine-consent?intake_form_id={intake['id']}" in email_service.sent[0]["html"]


def test_intake_link_uses_partial_token(client, doctor, as_user, partial, email_service):
    response = client.post(
        URL, json={"form_type": "intake", "partial_form_id": partial["id"]}, headers=as_user(doctor)
    )
    assert response.status_code == 200

    sent = email_service.sent[0]
    assert sent["subject"].startswith("Complete Your Intake Form - Jane Doe")
    assert f"/intake?token={partial['token']}" in sent["html"]


def test_intake_link_requires_partial_form(client, doctor, as_user, intake, email_service):
    response = client.post(
        URL, json={"form_type": "intake", "intake_form_id": intake["id"]}, headers=as_user(doctor)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Partial form ID required for intake form"
    assert email_service.sent == []


def test_falls_back_to_patient_profile(client, doctor, patient, as_user, email_service):
    response = client.post(
        URL, json={"form_type": "ibogaine", "patient_id": patient["id"]}, headers=as_user(doctor)
    )
    assert response.status_code == 200
    assert response.json()["recipient_email"] == "jane@example.com"
    assert "/patient/ibogaine-consent\"" in email_service.sent[0]["html"]


@pytest.mark.parametrize("body_for", [
    lambda staff: {"form_type": "medical", "intake_form_id": str(uuid.uuid4())},
    lambda staff: {"form_type": "medical", "patient_id": staff["id"]},
    lambda staff: {"form_type": "medical"},
], ids=["unknown-intake", "staff-profile", "no-ids"])
def test_unknown_recipient_returns_400(client, doctor, as_user, email_service, body_for):
    response = client.post(URL, json=body_for(doctor), headers=as_user(doctor))
    assert response.status_code == 400
    assert response.json()["error"] == "Could not determine recipient email address"


def test_malformed_id_rejected(client, doctor, as_user):
    response = client.post(URL, json={"form_type": "medical", "intake_form_id": "abc"}, headers=as_user(doctor))
    assert response.status_code == 422


def test_patients_cannot_send_form_links(client, patient, as_user, intake):
    response = client.post(
        URL, json={"form_type": "medical", "intake_form_id": intake["id"]}, headers=as_user(patient)
    )
    assert response.status_code == 403


def test_delivery_failure_returns_502(client, doctor, as_user, intake, email_service):
    email_service.fail = True
    response = client.post(
        URL, json={"form_type": "medical", "intake_form_id": intake["id"]}, headers=as_user(doctor)
    )
    assert response.status_code == 502
    assert response.json()["success"] is False
