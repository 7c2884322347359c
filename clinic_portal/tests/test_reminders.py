"""
Tests for the onboarding form reminder sweep, its endpoint and the beat task.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from services import ReminderService
from core.datetime_utils import format_iso
from tasks.reminder_tasks import send_form_reminders_task

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def reminder_service(profile_repo, intake_repo, medical_repo, agreement_repo, email_service):
    return ReminderService(
        profile_repository=profile_repo,
        intake_repository=intake_repo,
        medical_history_repository=medical_repo,
        agreement_repository=agreement_repo,
        email_service=email_service,
        grace_hours=48,
    )


def _activated_agreement(agreement_repo, patient, hours_ago, **values):
    row = {
        "patient_id": patient["id"],
        "patient_first_name": patient["first_name"],
        "patient_last_name": patient["last_name"],
        "patient_email": patient["email"],
        "is_activated": True,
        "activated_at": format_iso(NOW - timedelta(hours=hours_ago)),
    }
    row.update(values)
    return agreement_repo.add(row)


def test_patient_without_forms_misses_intake_and_medical(reminder_service, patient):
    assert reminder_service.missing_forms(patient, NOW) == ["Application Form", "Medical Health History"]


def test_submitted_forms_are_not_reminded(reminder_service, patient, intake_repo, medical_repo):
    intake_repo.add({"first_name": "Jane", "last_name": "Doe", "email": "JANE@example.com"})
    medical_repo.add({"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"})
    assert reminder_service.missing_forms(patient, NOW) == []


def test_unsigned_agreement_after_grace_period(reminder_service, patient, agreement_repo):
    _activated_agreement(agreement_repo, patient, hours_ago=72, patient_signature_name="Jane Doe")
    assert "Service Agreement" in reminder_service.missing_forms(patient, NOW)


def test_unsigned_agreement_within_grace_period(reminder_service, patient, agreement_repo):
    _activated_agreement(agreement_repo, patient, hours_ago=24)
    assert "Service Agreement" not in reminder_service.missing_forms(patient, NOW)


def test_signed_agreement_is_not_reminded(reminder_service, patient, agreement_repo):
    _activated_agreement(
        agreement_repo, patient, hours_ago=72,
        patient_signature_name="Jane Doe", patient_signature_data="data:image/png;base64,AAAA",
    )
    assert "Service Agreement" not in reminder_service.missing_forms(patient, NOW)


def test_send_reminders_counts(reminder_service, email_service, owner, doctor, patient, other_patient, intake_repo):
    intake_repo.add({"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"})

    result = reminder_service.send_reminders(now=NOW)

    # Staff profiles are never reminded
    assert result == {"patients_checked": 2, "sent": 3, "failed": 0}
    subjects = sorted((e["to"], e["subject"].split(" | ")[0]) for e in email_service.sent)
    assert subjects == [
        ("jane@example.com", "Reminder: Complete Your Medical Health History Form"),
        ("sam@example.com", "Reminder: Complete Your Application Form Form"),
        ("sam@example.com", "Reminder: Complete Your Medical Health History Form"),
    ]
    jane_email = next(e for e in email_service.sent if e["to"] == "jane@example.com")
    assert "Jane" in jane_email["html"]
    assert "/patient/tasks" in jane_email["html"]


def test_send_reminders_counts_failures(reminder_service, email_service, patient):
    email_service.fail = True
    assert reminder_service.send_reminders(now=NOW) == {"patients_checked": 1, "sent": 0, "failed": 2}


def test_run_endpoint(client, owner, patient, as_user, email_service):
    response = client.post("/api/v1/reminders/run", headers=as_user(owner))
    assert response.status_code == 200
    assert response.json() == {"success": True, "patients_checked": 1, "sent": 2, "failed": 0}
    assert len(email_service.sent) == 2


def test_run_endpoint_requires_owner(client, doctor, as_user):
    response = client.post("/api/v1/reminders/run", headers=as_user(doctor))
    assert response.status_code == 403


# =============================================================================
# BEAT TASK
# =============================================================================

def test_reminder_task_runs_sweep():
    service = MagicMock()
    service.send_reminders.return_value = {"patients_checked": 3, "sent": 2, "failed": 1}

    with patch("tasks.reminder_tasks.build_reminder_service", return_value=service):
        result = send_form_reminders_task.run()

    assert result == {"patients_checked": 3, "sent": 2, "failed": 1}
    service.send_reminders.assert_called_once_with()


def test_reminder_task_reraises_failures():
    service = MagicMock()
    service.send_reminders.side_effect = RuntimeError("database is locked")

    with patch("tasks.reminder_tasks.build_reminder_service", return_value=service):
        with pytest.raises(RuntimeError):
            send_form_reminders_task.run()
