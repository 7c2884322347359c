"""
Shared pytest fixtures for API tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Fake Integrations: Gmail, the Celery email queue and Metricool are
   replaced by in-process fakes that record what they were asked to do

Fixture Hierarchy:
    temp_db → repositories → fakes → test_app → client
"""
import os
import tempfile
import pytest
import httpx
from fastapi.testclient import TestClient
from fastapi import FastAPI

# Set test API key before importing config modules
# This must happen before any config imports
TEST_API_KEY = "test-api-key-for-testing-purposes-12345678"
os.environ.setdefault("CLINIC_PORTAL_API_KEY", TEST_API_KEY)

from repositories.base import Database
from repositories import (
    ProfileRepository,
    IntakeFormRepository,
    PartialIntakeRepository,
    MedicalHistoryRepository,
    ServiceAgreementRepository,
    ConsentFormRepository,
    LeadTaskRepository,
    LeadNoteRepository,
    NotificationRepository,
    MessagingRepository,
    DocumentRepository,
)
from services import UploadService
from services.metricool_service import MetricoolService
from core.exceptions import EmailDeliveryError, setup_exception_handlers
from core.marketing_registry import get_timeline_endpoint
from core import dependencies as deps
from core.auth import verify_api_key

METRICOOL_TEST_URL = "https://metricool.test/api"


# =============================================================================
# FAKE INTEGRATIONS
# =============================================================================

class FakeEmailService:
    """Records sent emails instead of calling Gmail. Set `fail` to simulate an outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise EmailDeliveryError("Gmail API error: 503", recipient=to)
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"msg-{len(self.sent)}"


class FakeEmailQueue:
    """Records queued emails instead of handing them to Celery."""

    def __init__(self):
        self.queued = []

    def enqueue(self, to, content):
        self.queued.append({"to": to, "subject": content.subject, "html": content.html})
        return f"task-{len(self.queued)}"


# =============================================================================
# DATABASE & REPOSITORIES
# =============================================================================

@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    This fixture creates a fresh SQLite database in a temp file,
    ensuring complete isolation between tests.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    # Cleanup (WAL mode leaves -wal/-shm files next to the database)
    for path in (db_path, f"{db_path}-wal", f"{db_path}-shm"):
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def profile_repo(temp_db):
    return ProfileRepository(db=temp_db)


@pytest.fixture
def intake_repo(temp_db):
    return IntakeFormRepository(db=temp_db)


@pytest.fixture
def partial_repo(temp_db):
    return PartialIntakeRepository(db=temp_db)


@pytest.fixture
def medical_repo(temp_db):
    return MedicalHistoryRepository(db=temp_db)


@pytest.fixture
def agreement_repo(temp_db):
    return ServiceAgreementRepository(db=temp_db)


@pytest.fixture
def consent_repo(temp_db):
    return ConsentFormRepository(db=temp_db)


@pytest.fixture
def lead_task_repo(temp_db):
    return LeadTaskRepository(db=temp_db)


@pytest.fixture
def lead_note_repo(temp_db):
    return LeadNoteRepository(db=temp_db)


@pytest.fixture
def notification_repo(temp_db):
    return NotificationRepository(db=temp_db)


@pytest.fixture
def messaging_repo(temp_db):
    return MessagingRepository(db=temp_db)


@pytest.fixture
def document_repo(temp_db):
    return DocumentRepository(db=temp_db)


# =============================================================================
# FAKES
# =============================================================================

@pytest.fixture
def email_service():
    """Fake Gmail sender used for partial intake invitations and reminders."""
    return FakeEmailService()


@pytest.fixture
def email_queue():
    """Fake Celery queue used for confirmation emails."""
    return FakeEmailQueue()


@pytest.fixture
def metricool_payloads():
    """
    Canned Metricool responses.

    Keys are endpoint paths (e.g. "/v2/analytics/posts/facebook") for post
    requests and "<network>:<metric>" for timeline requests. Requests with
    no canned payload get a 500.
    """
    return {}


@pytest.fixture
def metricool_requests():
    """Every request the fake Metricool API received."""
    return []


@pytest.fixture
def metricool_service(metricool_payloads, metricool_requests):
    """MetricoolService talking to an httpx.MockTransport."""
    timeline_endpoint = get_timeline_endpoint()

    def handler(request: httpx.Request) -> httpx.Response:
        metricool_requests.append(request)
        path = request.url.path[len("/api"):]
        if path == timeline_endpoint:
            key = f"{request.url.params['network']}:{request.url.params['metric']}"
        else:
            key = path
        if key not in metricool_payloads:
            return httpx.Response(500, json={"error": "Internal error"})
        return httpx.Response(200, json=metricool_payloads[key])

    return MetricoolService(
        base_url=METRICOOL_TEST_URL,
        user_token="test-metricool-token",
        user_id="42",
        blog_id="7",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def upload_service(document_repo, tmp_path):
    """UploadService writing under the test's tmp_path with a 1KB limit."""
    return UploadService(
        document_repository=document_repo,
        upload_dir=str(tmp_path / "uploads"),
        max_size=1024,
    )


# =============================================================================
# APPLICATION
# =============================================================================

@pytest.fixture
def test_app(temp_db, email_service, email_queue, metricool_service, upload_service):
    """
    Create a FastAPI test app with dependency overrides.

    This fixture creates a full FastAPI app and overrides the DI dependencies
    to use test instances. This approach:
    - Uses the real routers (testing actual endpoint code)
    - Injects the test database and fake integrations via dependency_overrides
    - Registers exception handlers for proper error response testing
    """
    from api.routers import ALL_ROUTERS

    app = FastAPI(title="Clinic Portal API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    # Repositories and services are built from get_database, so overriding
    # it is enough to point every endpoint at the test database
    app.dependency_overrides[deps.get_database] = lambda: temp_db
    app.dependency_overrides[deps.get_email_service] = lambda: email_service
    app.dependency_overrides[deps.get_email_queue] = lambda: email_queue
    app.dependency_overrides[deps.get_metricool_service] = lambda: metricool_service
    app.dependency_overrides[deps.get_upload_service] = lambda: upload_service

    # Override auth to skip API key verification in tests
    # The acting user is still resolved from X-User-Id
    async def skip_auth():
        return TEST_API_KEY
    app.dependency_overrides[verify_api_key] = skip_auth

    # Include the real routers (not test copies)
    for router in ALL_ROUTERS:
        app.include_router(router)

    yield app

    # Cleanup: Clear dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


# =============================================================================
# PROFILES
# =============================================================================

def _add_profile(profile_repo, email, first_name, last_name, role):
    return profile_repo.add({
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "name": f"{first_name} {last_name}",
        "role": role,
    })


@pytest.fixture
def owner(profile_repo):
    return _add_profile(profile_repo, "owner@clinic.test", "Olivia", "Owner", "owner")


@pytest.fixture
def doctor(profile_repo):
    return _add_profile(profile_repo, "doctor@clinic.test", "Daniel", "Reyes", "doctor")


@pytest.fixture
def patient(profile_repo):
    """Patient whose email matches the default form payloads."""
    return _add_profile(profile_repo, "jane@example.com", "Jane", "Doe", "patient")


@pytest.fixture
def other_patient(profile_repo):
    return _add_profile(profile_repo, "sam@example.com", "Sam", "Lee", "patient")


@pytest.fixture
def as_user():
    """Headers that make a request act as the given profile."""
    def headers(profile):
        return {"X-User-Id": profile["id"]}
    return headers


# =============================================================================
# FORM PAYLOADS
# =============================================================================

@pytest.fixture
def intake_payload():
    return {
        "filled_by": "self",
        "program_type": "mental_health",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone_number": "(555) 123-4567",
        "date_of_birth": "1985-04-12",
        "gender": "female",
        "address_line_1": "12 Palm Street",
        "city": "Austin",
        "state": "TX",
        "zip_code": "73301",
        "country": "United States",
        "emergency_contact_first_name": "John",
        "emergency_contact_last_name": "Doe",
        "emergency_contact_phone": "(555) 765-4321",
        "privacy_policy_accepted": True,
    }


@pytest.fixture
def medical_history_payload():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "date_of_birth": "1985-04-12",
        "gender": "F",
        "weight": "62 kg",
        "height": "168 cm",
        "phone_number": "(555) 123-4567",
        "email": "jane@example.com",
        "emergency_contact_name": "John Doe",
        "emergency_contact_phone": "(555) 765-4321",
        "primary_care_provider": "Dr. Smith",
        "current_health_status": "Good",
        "reason_for_coming": "Depression",
        "medical_conditions": "None",
        "substance_use_history": "None",
        "mental_health_treatment": "Therapy since 2020",
        "allergies": "Penicillin",
        "previous_psychedelics_experiences": "None",
        "dietary_lifestyle_habits": "Vegetarian",
        "physical_activity_exercise": "Walks daily",
        "signature_data": "data:image/png;base64,iVBORw0KGgo=",
        "signature_date": "2025-03-01",
    }


@pytest.fixture
def agreement_payload():
    return {
        "patient_first_name": "Jane",
        "patient_last_name": "Doe",
        "patient_email": "jane@example.com",
        "patient_phone_number": "(555) 123-4567",
        "total_program_fee": "$12,500.00",
        "deposit_amount": "$5,000.00",
        "deposit_percentage": "40",
        "remaining_balance": "$7,500.00",
        "payment_method": "wire transfer",
        "patient_signature_name": "Jane Doe",
        "patient_signature_first_name": "Jane",
        "patient_signature_last_name": "Doe",
        "patient_signature_date": "2025-03-01",
        "provider_signature_name": "Omar Calderon",
        "provider_signature_first_name": "Omar",
        "provider_signature_last_name": "Calderon",
        "provider_signature_date": "2025-03-01",
        "program_type": "addiction",
        "number_of_days": 14,
    }


@pytest.fixture
def consent_payload():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "date_of_birth": "1985-04-12",
        "phone_number": "(555) 123-4567",
        "email": "jane@example.com",
        "address": "12 Palm Street, Austin, TX 73301",
        "treatment_date": "2025-04-01",
        "facilitator_doctor_name": "Dr. Omar Calderon",
        "consent_for_treatment": True,
        "risks_and_benefits": True,
        "pre_screening_health_assessment": True,
        "voluntary_participation": True,
        "confidentiality": True,
        "liability_release": True,
        "payment_collection": True,
        "signature_data": "data:image/png;base64,iVBORw0KGgo=",
        "signature_date": "2025-03-02",
        "signature_name": "Jane Doe",
    }
