"""
Tests for medical history form submission and retrieval.
"""


def test_submit_medical_history_queues_confirmation(client, medical_history_payload, medical_repo, email_queue):
    """The form is stored and the patient gets a confirmation."""
    response = client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    assert response.status_code == 201
    form_id = response.json()["id"]

    stored = medical_repo.get_by_id(form_id)
    assert stored["gender"] == "F"
    assert stored["is_pregnant"] is False

    assert [q["to"] for q in email_queue.queued] == ["jane@example.com"]
    assert email_queue.queued[0]["subject"].startswith("Medical History Form Received")


def test_submit_notifies_filler_of_linked_intake(client, intake_payload, medical_history_payload, email_queue):
    """When the intake was filled in by someone else, they get a copy."""
    intake_payload.update({
        "filled_by": "someone_else",
        "filler_relationship": "Sister",
        "filler_first_name": "Mary",
        "filler_last_name": "Doe",
        "filler_email": "mary@example.com",
        "filler_phone": "(555) 222-3333",
    })
    intake_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    email_queue.queued.clear()

    medical_history_payload["intake_form_id"] = intake_id
    response = client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    assert response.status_code == 201

    recipients = [q["to"] for q in email_queue.queued]
    assert recipients == ["jane@example.com", "mary@example.com"]


def test_submit_with_self_filled_intake_sends_one_email(client, intake_payload, medical_history_payload, email_queue):
    intake_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    email_queue.queued.clear()

    medical_history_payload["intake_form_id"] = intake_id
    client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    assert len(email_queue.queued) == 1


def test_missing_required_field_rejected(client, medical_history_payload):
    """Required narrative fields cannot be blank."""
    medical_history_payload["allergies"] = ""
    response = client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    assert response.status_code == 422


def test_invalid_gender_rejected(client, medical_history_payload):
    medical_history_payload["gender"] = "female"
    response = client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    assert response.status_code == 422


def test_get_own_medical_history(client, patient, as_user, medical_history_payload):
    """Patients can read forms carrying their email."""
    form_id = client.post("/api/v1/medical-history-forms", json=medical_history_payload).json()["id"]
    response = client.get(f"/api/v1/medical-history-forms/{form_id}", headers=as_user(patient))
    assert response.status_code == 200
    assert response.json()["reason_for_coming"] == "Depression"


def test_owner_can_read_any_medical_history(client, owner, as_user, medical_history_payload):
    form_id = client.post("/api/v1/medical-history-forms", json=medical_history_payload).json()["id"]
    response = client.get(f"/api/v1/medical-history-forms/{form_id}", headers=as_user(owner))
    assert response.status_code == 200


def test_other_patient_forbidden(client, other_patient, as_user, medical_history_payload):
    form_id = client.post("/api/v1/medical-history-forms", json=medical_history_payload).json()["id"]
    response = client.get(f"/api/v1/medical-history-forms/{form_id}", headers=as_user(other_patient))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized - You can only view your own forms"


def test_unknown_medical_history_returns_404(client, owner, as_user):
    response = client.get("/api/v1/medical-history-forms/missing", headers=as_user(owner))
    assert response.status_code == 404
    assert response.json()["success"] is False
