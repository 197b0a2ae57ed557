"""
FastAPI Application Entry Point.

This is the main application file for the Freight Ledger Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException
from fastapi.exceptions import RequestValidationError
from freight_ledger.app.core.config import settings
from freight_ledger.app.api.v1.router import router as api_v1_router
from freight_ledger.app.core.observability import ObservabilityMiddleware, configure_logging
from freight_ledger.app.core.redis_client import get_redis, ping_redis
from freight_ledger.app.db.session import create_tables
from freight_ledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from freight_ledger.app.models.audit_log import AuditLog
from freight_ledger.app.models.fleet import Vehicle, Driver, Client  # before shipments for FKs
from freight_ledger.app.models.shipment import Shipment, Invoice
from freight_ledger.app.models.expense import Expense
from freight_ledger.app.models.debt import Debt, DebtPayment


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Configures logging.
    2. Creates database tables on startup.
    """
    configure_logging()
    await create_tables()
    yield


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Back office for freight shipments, expenses and personal debts",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check(redis=Depends(get_redis)):
    """
    Health check endpoint.

    Redis only backs the rate cache, so an unreachable Redis is reported
    but does not make the service unhealthy.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await ping_redis(redis) else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Freight Ledger Backend API",
        "docs": "/docs",
        "health": "/health",
    }
