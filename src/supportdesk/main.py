"""
Support Desk - Main Application
================================

Helpdesk ticketing service.

Modules:
- Identity: accounts, login, role gating
- Tickets: lifecycle (create, status, assignment, comments) with an audit trail
- SLA: priority-based deadlines, live status and compliance reporting

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, repositories, unit of work
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from supportdesk.config import settings
from supportdesk.core import ApplicationException

# Infrastructure
from supportdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from supportdesk.infrastructure.unit_of_work import (
    InMemoryDataset,
    InMemoryUnitOfWork,
    SQLAlchemyUnitOfWork,
)
from supportdesk.identity.application import UserService

# Module Routers
from supportdesk.identity.interfaces import auth_router, users_router
from supportdesk.tickets.interfaces import tickets_router
from supportdesk.sla.interfaces import performance_router, sla_router

# Middleware
from supportdesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    application_exception_handler,
    global_exception_handler,
    request_validation_exception_handler,
)

# Logging
from supportdesk.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def _seed_users(unit_of_work) -> None:
    created = await UserService(unit_of_work).seed_default_users()
    if created:
        logger.info("Demo accounts created", extra={"count": created})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Select the store backend (``settings.storage_backend``)
    3. database: initialise the engine and create missing tables
       memory: create the process-wide dataset
    4. Seed the demo accounts on an empty store

    SHUTDOWN:
    1. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Support Desk", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend,
    })

    app.state.settings = settings
    app.state.storage_backend = settings.storage_backend

    if settings.storage_backend == "database":
        logger.info("Initializing database")
        init_database()
        await create_tables()
        if settings.seed_default_users:
            async with get_session_context() as session:
                await _seed_users(SQLAlchemyUnitOfWork(session))
    else:
        app.state.dataset = InMemoryDataset()
        if settings.seed_default_users:
            await _seed_users(InMemoryUnitOfWork(app.state.dataset))

    logger.info("Support Desk started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Support Desk")

    if settings.storage_backend == "database":
        await close_database()

    logger.info("Support Desk shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Support Desk API",
    description="""
    ## Helpdesk Ticketing System

    Customers open tickets; agents triage, comment, reassign and resolve
    them against priority-based SLA targets.

    ---

    ### SLA Targets

    | Priority | Resolution time |
    |----------|-----------------|
    | Critical | 4 hours         |
    | High     | 8 hours         |
    | Medium   | 24 hours        |
    | Low      | 72 hours        |

    An open ticket is **at risk** once 25% or less of its time is left.

    ---

    ### Roles

    - `user`: opens tickets and sees only their own
    - `agent`: sees and triages every ticket
    - `admin`: agent rights plus account management
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
app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)
# Added last so it runs first and the correlation id is set for the others
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tickets_router)
app.include_router(sla_router)
app.include_router(performance_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {"storage_backend": "memory"}
                }
            }
        }
    }
})
async def health_check(request: Request):
    """Health check endpoint for load balancers and orchestrators."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {
            "storage_backend": getattr(request.app.state, "storage_backend", "not_initialized"),
        }
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Support Desk",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "identity": {"prefix": "/api/auth, /api/users"},
            "tickets": {"prefix": "/api/tickets"},
            "performance": {"prefix": "/api/performance"},
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "supportdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
