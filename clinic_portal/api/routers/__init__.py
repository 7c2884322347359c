"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.meta import router as meta_router
from api.routers.profiles import router as profiles_router
from api.routers.intake import router as intake_router
from api.routers.partial_intake import router as partial_intake_router
from api.routers.medical_history import router as medical_history_router
from api.routers.service_agreements import router as service_agreements_router
from api.routers.consents import router as consents_router
from api.routers.pipeline import router as pipeline_router
from api.routers.patient_tasks import router as patient_tasks_router
from api.routers.leads import router as leads_router
from api.routers.notifications import router as notifications_router
from api.routers.messages import router as messages_router
from api.routers.documents import router as documents_router
from api.routers.marketing import router as marketing_router
from api.routers.dashboard import router as dashboard_router
from api.routers.reminders import router as reminders_router
from api.routers.form_emails import router as form_emails_router

ALL_ROUTERS = (
    health_router,
    meta_router,
    profiles_router,
    intake_router,
    partial_intake_router,
    medical_history_router,
    service_agreements_router,
    consents_router,
    pipeline_router,
    patient_tasks_router,
    leads_router,
    notifications_router,
    messages_router,
    documents_router,
    marketing_router,
    dashboard_router,
    reminders_router,
    form_emails_router,
)

__all__ = [
    "ALL_ROUTERS",
    "health_router",
    "meta_router",
    "profiles_router",
    "intake_router",
    "partial_intake_router",
    "medical_history_router",
    "service_agreements_router",
    "consents_router",
    "pipeline_router",
    "patient_tasks_router",
    "leads_router",
    "notifications_router",
    "messages_router",
    "documents_router",
    "marketing_router",
    "dashboard_router",
    "reminders_router",
    "form_emails_router",
]
