"""
FastAPI Application Entry Point.

This is the main application file for the Pet Shop Shipping Admin.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from petshop_shipping.app.core.config import settings
from petshop_shipping.app.api.v1.router import router as api_v1_router
from petshop_shipping.app.core.observability import ObservabilityMiddleware, configure_logging
from petshop_shipping.app.core.session import create_session_store
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Configures logging on startup.
    """
    configure_logging()
    yield


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Shipment lifecycle and tracking reconciliation for the pet shop storefront",
    lifespan=lifespan,
)

# Caller-owned state: the admin order board and the persisted session values
app.state.order_board = OrderBoard()
app.state.session_store = create_session_store()

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Reports configuration only; the storefront backend is not contacted.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "backend_url": settings.backend_url,
        "session_backend": settings.session_backend,
        "board_orders": len(app.state.order_board),
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
        "message": "Welcome to the Pet Shop Shipping Admin API",
        "docs": "/docs",
        "health": "/health",
    }
