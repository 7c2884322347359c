"""
Tests for the patient onboarding task list.
"""


def _tasks(client, patient, as_user):
    response = client.get("/api/v1/patient-tasks", headers=as_user(patient))
    assert response.status_code == 200
    return response.json()


def test_new_patient_has_four_pending_tasks(client, patient, as_user):
    body = _tasks(client, patient, as_user)
    assert [t["id"] for t in body["tasks"]] == [
        "intake-new", "medical-new", "service-new", "ibogaine-consent-new"
    ]
    assert all(t["status"] == "not_started" for t in body["tasks"])
    assert body["statistics"] == {"completed": 0, "total": 4, "in_progress": 0, "required": 4, "optional": 0}


def test_completed_intake_links_to_view(client, patient, as_user, intake_payload):
    intake_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]

    tasks = {t["type"]: t for t in _tasks(client, patient, as_user)["tasks"]}
    assert tasks["intake"]["id"] == f"intake-{intake_id}"
    assert tasks["intake"]["status"] == "completed"
    assert tasks["intake"]["link"] == f"/intake?view={intake_id}"
    assert tasks["intake"]["completed_at"] is not None

    # The pending medical history form is pre-linked to the intake
    assert tasks["medical_history"]["link"] == f"/medical-history?intake_form_id={intake_id}"


def test_intake_found_by_name_when_email_differs(client, patient, as_user, intake_payload):
    """Forms filled in under another email are matched by the patient's name."""
    intake_payload["email"] = "jane.doe@work.example.com"
    intake_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]

    tasks = {t["type"]: t for t in _tasks(client, patient, as_user)["tasks"]}
    assert tasks["intake"]["form_id"] == intake_id


def test_all_forms_completed(
    client, owner, patient, as_user, intake_payload, medical_history_payload, agreement_payload, consent_payload
):
    intake_id = client.post("/api/v1/intake-forms", json=intake_payload).json()["id"]
    medical_history_payload["intake_form_id"] = intake_id
    client.post("/api/v1/medical-history-forms", json=medical_history_payload)
    agreement_payload["patient_id"] = patient["id"]
    client.post("/api/v1/service-agreements", json=agreement_payload, headers=as_user(owner))
    client.post("/api/v1/ibogaine-consent-forms", json=consent_payload)

    body = _tasks(client, patient, as_user)
    assert all(t["status"] == "completed" for t in body["tasks"])
    assert body["statistics"]["completed"] == 4
    assert body["statistics"]["required"] == 0


def test_other_patient_sees_nothing(client, other_patient, as_user, intake_payload):
    client.post("/api/v1/intake-forms", json=intake_payload)
    body = _tasks(client, other_patient, as_user)
    assert body["statistics"]["completed"] == 0


def test_tasks_require_user(client):
    response = client.get("/api/v1/patient-tasks")
    assert response.status_code == 401
