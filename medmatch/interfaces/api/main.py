"""
FastAPI Main Application - API entry point.

Run with: uvicorn medmatch.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from medmatch import __version__
from medmatch.config import get_settings

from .deps import cleanup_services, init_services
from .middleware import (
    ErrorHandlerMiddleware,
    LatencyMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    validation_exception_handler,
)
from .routes import accounts, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Medmatch API...")
    logger.info("  Environment: %s", settings.environment)
    logger.info("  Database: %s", settings.db_path)

    await init_services()
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down Medmatch API...")
    await cleanup_services()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Medmatch API",
        description="Accounts and authentication for the Medmatch platform",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters - last added = outermost)
    # 1. Rate limiting
    app.add_middleware(
        RateLimitMiddleware, requests_per_minute=settings.rate_limit_per_minute
    )

    # 2. Error handling (catch exceptions from inner layers)
    app.add_middleware(ErrorHandlerMiddleware)

    # 3. Latency tracking
    app.add_middleware(LatencyMiddleware)

    # 4. Request ID
    app.add_middleware(RequestIDMiddleware)

    # 5. CORS - credentials are required for the refresh cookie
    allowed_origins = [settings.frontend_url]
    if settings.api_debug:
        allowed_origins.append("http://127.0.0.1:3000")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(accounts.router, prefix="/api/accounts", tags=["Accounts"])

    return app


# Create app instance
app = create_app()
