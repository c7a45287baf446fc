"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter

from buildersearch import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "buildersearch"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "BuilderSearch API",
        "version": __version__,
        "description": "Record search and ranking for the AI Builder platform",
        "docs": "/docs",
    }
