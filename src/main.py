"""
Maintenance Logbook - Main Application
=======================================

Maintenance-ticket tracker for a residential building.

Modules:
- Complaints: filing, technician assignment, status updates,
  SLA escalation and dashboard analytics

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and pure business rules
- Infrastructure: Database, SLA config, attachment storage
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from src.config import settings
from src.core import ApplicationException

# Infrastructure
from src.infrastructure.database import init_database, close_database, create_tables

# Module Routers
from src.complaints.interfaces import complaints_router, technicians_router
from src.complaints.interfaces.dependencies import get_config_provider

# Middleware and logging
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from src.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Load SLA configuration

    SHUTDOWN:
    1. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Maintenance Logbook", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use Alembic in production)
    logger.info("Creating database tables")
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    logger.info("Loading SLA configuration")
    policy = get_config_provider().get_policy()
    logger.info("SLA thresholds loaded", extra={"category_sla_hours": policy.category_sla_hours})

    app.state.settings = settings

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Maintenance Logbook")
    await close_database()
    logger.info("Maintenance Logbook shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Maintenance Logbook API",
    description="""
    ## Residential Maintenance Logbook

    Residents file complaints, admins assign technicians and watch SLAs,
    technicians post updates until the problem is resolved.

    **SLA thresholds (hours before escalation):**

    | Category    | Hours |
    |-------------|-------|
    | electricity | 4     |
    | water       | 2     |
    | wifi        | 6     |
    | cleaning    | 12    |

    Escalation is computed on every read, it is never stored.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(complaints_router)
app.include_router(technicians_router)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for load balancers and orchestrators."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Maintenance Logbook",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
        "endpoints": [
            "GET /api/complaints - List complaints",
            "POST /api/complaints - File a complaint",
            "GET /api/complaints/analytics - Dashboard metrics",
            "GET /api/complaints/{id} - Get a complaint",
            "POST /api/complaints/{id}/assign - Assign a technician",
            "POST /api/complaints/{id}/updates - Post a status update",
            "GET /api/complaints/{id}/technicians - Technicians for a complaint",
            "POST /api/technicians - Add a technician",
            "GET /api/technicians - List technicians",
            "GET /api/technicians/{id} - Get a technician"
        ]
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
