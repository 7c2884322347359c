"""
Health, readiness, and metrics endpoints for operational visibility.

    /health         liveness, never touches dependencies
    /ready          SQLite, upload storage, Redis broker, Gmail and Metricool
    /metrics        Prometheus text format
    /metrics/json   the same counters as JSON

No authentication: these are scraped by infrastructure. SQLite and the
upload directory are required to serve requests; the broker and the two
integrations only degrade the service (emails wait, marketing pages 502).
"""
import logging
import os
import time
from typing import Any, Callable, Dict, List, Optional

import redis
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from services import UploadService
from core.config import (
    GMAIL_CLIENT_ID,
    GMAIL_CLIENT_SECRET,
    GMAIL_REFRESH_TOKEN,
    GMAIL_SENDER,
    METRICOOL_USER_TOKEN,
    REDIS_URL,
)
from core.datetime_utils import now_iso
from core.dependencies import get_database, get_upload_service
from core.middleware import get_metrics_collector

logger = logging.getLogger(__name__)

SERVICE_NAME = "Clinic Portal API"
SERVICE_VERSION = "1.0.0"

CRITICAL_DEPENDENCIES = frozenset({"database", "upload_storage"})

router = APIRouter(tags=["Health & Observability"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    name: str
    status: str  # "ok", "degraded", "unavailable", "not_configured"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    status: str  # "ready", "degraded", "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class TaskCounts(BaseModel):
    success: int
    failure: int


class MetricsResponse(BaseModel):
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    emails_queued_total: int
    emails_queue_failed_total: int
    background_tasks: Dict[str, TaskCounts]


# =============================================================================
# HEALTH ENDPOINT (LIVENESS)
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Check if the application is running. Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=SERVICE_VERSION, timestamp=now_iso())


# =============================================================================
# READINESS ENDPOINT
# =============================================================================

def _timed_check(name: str, check: Callable[[], str], failure_status: str) -> DependencyStatus:
    """
    Run a dependency check and time it.

    The check returns a success message; any exception it raises becomes
    `failure_status` with the exception type as the message.
    """
    start = time.perf_counter()
    try:
        message = check()
        status = "ok"
    except Exception as e:
        log = logger.error if name in CRITICAL_DEPENDENCIES else logger.warning
        log(f"{name} health check failed", extra={"error": str(e)})
        message = f"{type(e).__name__}: {e}"
        status = failure_status
    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    return DependencyStatus(name=name, status=status, latency_ms=latency_ms, message=message)


def _check_database(db) -> DependencyStatus:
    def check() -> str:
        with db.get_connection() as conn:
            conn.execute("SELECT 1")
        return "SQLite connection healthy"

    return _timed_check("database", check, "unavailable")


def _check_upload_storage(upload_dir) -> DependencyStatus:
    def check() -> str:
        if not os.path.isdir(upload_dir):
            raise FileNotFoundError(str(upload_dir))
        if not os.access(upload_dir, os.W_OK):
            raise PermissionError(f"{upload_dir} is not writable")
        return "Upload directory writable"

    return _timed_check("upload_storage", check, "unavailable")


def _check_broker() -> DependencyStatus:
    def check() -> str:
        redis.from_url(REDIS_URL, socket_timeout=2).ping()
        return "Redis broker healthy"

    return _timed_check("celery_broker", check, "degraded")


def _check_configured(name: str, *values: Any) -> DependencyStatus:
    """Integrations are not called from the readiness check, only checked for credentials."""
    if all(values):
        return DependencyStatus(name=name, status="ok", message="Credentials configured")
    return DependencyStatus(name=name, status="not_configured", message="Credentials missing")


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check",
    description="Check if the application is ready to serve requests. "
                "Returns 503 if the database or upload storage is unavailable."
)
async def readiness_check(
    response: Response,
    db=Depends(get_database),
    upload_service: UploadService = Depends(get_upload_service),
) -> ReadyResponse:
    dependencies = [
        _check_database(db),
        _check_upload_storage(upload_service.upload_dir),
        _check_broker(),
        _check_configured("gmail", GMAIL_CLIENT_ID, GMAIL_CLIENT_SECRET, GMAIL_REFRESH_TOKEN, GMAIL_SENDER),
        _check_configured("metricool", METRICOOL_USER_TOKEN),
    ]

    if any(d.status != "ok" for d in dependencies if d.name in CRITICAL_DEPENDENCIES):
        status = "not_ready"
        response.status_code = 503
    elif any(d.status != "ok" for d in dependencies):
        status = "degraded"
    else:
        status = "ready"

    return ReadyResponse(status=status, dependencies=dependencies, timestamp=now_iso())


# =============================================================================
# METRICS ENDPOINTS
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Request counts and latency, queued emails and Celery task outcomes "
                "in Prometheus text format."
)
async def get_metrics() -> Response:
    return Response(
        content=get_metrics_collector().get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
    description="The /metrics counters as JSON."
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())


@router.get("/", summary="API root")
async def root() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics",
    }
