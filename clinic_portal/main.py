"""
FastAPI application entry point for the Clinic Portal API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging for Grafana/Loki
- Request ID Propagation: UUID-based request tracking across logs
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: Consistent {"success": false, "error": ...} responses
- CORS Middleware: Allows cross-origin requests from the portal frontend
- Lifespan Management: Database initialization and cleanup
- Metrics Collection: In-memory metrics for Prometheus/Grafana scraping

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack (order matters!)                          │
    │    ├── LoggingMiddleware  - Request logging & metrics       │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py          - /health, /ready, /metrics       │
    │    ├── intake, partial_intake, medical_history,             │
    │    │   service_agreements, consents - onboarding forms      │
    │    ├── pipeline, patient_tasks, leads, notifications        │
    │    ├── messages, documents                                  │
    │    └── marketing, dashboard, reminders                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← Injected into Services    │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (SQLite)              ← Injected into Repositories│
    └─────────────────────────────────────────────────────────────┘

Background work (email delivery, daily form reminders) runs in Celery
workers; see celery_app.py.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

# Registers the configured Celery app as current so queued emails use the Redis broker
import celery_app  # noqa: F401
from core.config import API_HOST, API_PORT, API_RELOAD
from core.dependencies import get_database
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import ALL_ROUTERS


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Initializes database connection (triggers schema creation)

    Shutdown:
        - Logs shutdown message
    """
    # Configure structured logging FIRST (before any other logging)
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Clinic Portal API...")

    db = get_database()
    logger.info(
        "Database initialized",
        extra={"db_path": db.db_path}
    )

    yield  # Application runs here

    logger.info("Clinic Portal API shutting down...")


def create_app() -> FastAPI:
    """Build the application; tests call this to get a fresh instance."""
    application = FastAPI(
        title="Clinic Portal API",
        description="REST API for the clinic's patient portal: onboarding forms, patient pipeline, "
                    "staff tasks, messaging, documents and marketing analytics.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    # PortalError and its subclasses are converted to the error envelope
    setup_exception_handlers(application)

    # Middleware is executed in REVERSE order of registration.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to the portal frontend origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(LoggingMiddleware)

    for router in ALL_ROUTERS:
        application.include_router(router)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
