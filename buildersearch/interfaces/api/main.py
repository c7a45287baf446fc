"""
FastAPI Main Application - Unified API entry point.

Run with: uvicorn buildersearch.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from buildersearch import __version__
from buildersearch.config import get_settings

from .deps import cleanup_services, init_services
from .middleware import (
    ErrorHandlerMiddleware,
    RateLimitMiddleware,
    RequestContextMiddleware,
    validation_exception_handler,
)
from .routes import health, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting BuilderSearch API...")
    logger.info("  Record store: %s", settings.record_store)
    logger.info(
        "  Query cache: %s",
        f"LRU({settings.cache_max_entries})" if settings.cache_max_entries else "unbounded",
    )

    await init_services()
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down BuilderSearch API...")
    await cleanup_services()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="BuilderSearch API",
        description="Record search and ranking for the AI Builder platform",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Last added = outermost, so the request ID is set before anything logs
    app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_rpm)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)

    allowed_origins = [
        "http://localhost:3000",  # Next.js dev server
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]
    if settings.api_debug:
        allowed_origins.append("http://localhost:*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, prefix="/api/search", tags=["Search"])

    return app


app = create_app()
