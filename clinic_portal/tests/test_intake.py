"""
Tests for public intake form submission and retrieval.
"""


def test_submit_intake_queues_confirmation(client, intake_payload, intake_repo, email_queue):
    """A public submission is stored and a confirmation email is queued."""
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True

    stored = intake_repo.get_by_id(data["id"])
    assert stored["email"] == "jane@example.com"
    assert stored["privacy_policy_accepted"] is True

    assert len(email_queue.queued) == 1
    assert email_queue.queued[0]["to"] == "jane@example.com"
    assert email_queue.queued[0]["subject"].startswith("Thank You for Your Application")


def test_submit_intake_records_client_ip_and_user_agent(client, intake_payload, intake_repo):
    """The first X-Forwarded-For hop is stored as the client IP."""
    response = client.post(
        "/api/v1/intake-forms",
        json=intake_payload,
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "portal-test"},
    )
    stored = intake_repo.get_by_id(response.json()["id"])
    assert stored["ip_address"] == "203.0.113.7"
    assert stored["user_agent"] == "portal-test"


def test_submit_intake_requires_privacy_policy(client, intake_payload):
    """The privacy policy must be accepted."""
    intake_payload["privacy_policy_accepted"] = False
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 422


def test_submit_intake_rejects_invalid_phone(client, intake_payload):
    """Phone numbers need at least ten digits."""
    intake_payload["phone_number"] = "555-12"
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 422


def test_someone_else_requires_filler_details(client, intake_payload):
    """Filling in for someone else requires every filler field."""
    intake_payload["filled_by"] = "someone_else"
    intake_payload["filler_first_name"] = "Mary"
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 422


def test_someone_else_with_filler_details(client, intake_payload, intake_repo):
    """A complete filler block is accepted and stored."""
    intake_payload.update({
        "filled_by": "someone_else",
        "filler_relationship": "Sister",
        "filler_first_name": "Mary",
        "filler_last_name": "Doe",
        "filler_email": "mary@example.com",
        "filler_phone": "(555) 222-3333",
    })
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 201
    stored = intake_repo.get_by_id(response.json()["id"])
    assert stored["filler_email"] == "mary@example.com"


def test_submit_intake_rejects_malformed_partial_form_id(client, intake_payload):
    """partial_form_id must be a UUID when present."""
    intake_payload["partial_form_id"] = "not-a-uuid"
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 422


def test_submit_intake_completes_partial_form(client, owner, as_user, intake_payload, partial_repo):
    """Submitting with partial_form_id marks the partial form completed."""
    created = client.post(
        "/api/v1/partial-intake-forms",
        json={"mode": "minimal", "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"},
        headers=as_user(owner),
    ).json()

    intake_payload["partial_form_id"] = created["id"]
    response = client.post("/api/v1/intake-forms", json=intake_payload)
    assert response.status_code == 201

    partial = partial_repo.get_by_id(created["id"])
    assert partial["completed_form_id"] == response.json()["id"]
    assert partial["completed_at"] is not None

    # The emailed link can't be used again
    response = client.get(f"/api/v1/partial-intake-forms/token/{created['token']}")
    assert response.status_code == 409
    assert response.json()["error"] == "This form has already been completed"


def test_get_intake_as_owner_of_email(client, patient, as_user, intake_payload):
    """A patient can read an intake carrying their email."""
    form_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    response = client.get(f"/api/v1/intake-forms/{form_id}", headers=as_user(patient))
    assert response.status_code == 200
    assert response.json()["id"] == form_id
    assert response.json()["program_type"] == "mental_health"


def test_get_intake_as_staff(client, doctor, as_user, intake_payload):
    """Staff can read any intake."""
    form_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    response = client.get(f"/api/v1/intake-forms/{form_id}", headers=as_user(doctor))
    assert response.status_code == 200


def test_get_intake_of_someone_else_is_forbidden(client, other_patient, as_user, intake_payload):
    """Patients cannot read other patients' intakes."""
    form_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    response = client.get(f"/api/v1/intake-forms/{form_id}", headers=as_user(other_patient))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized - You can only view your own forms"


def test_get_unknown_intake_returns_404(client, doctor, as_user):
    """Unknown ids return 404 with the error envelope."""
    response = client.get("/api/v1/intake-forms/missing", headers=as_user(doctor))
    assert response.status_code == 404
    assert response.json()["success"] is False
