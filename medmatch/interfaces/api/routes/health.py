"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter

from medmatch import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "medmatch"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "Medmatch API",
        "version": __version__,
        "description": "Accounts and authentication for the Medmatch platform",
        "docs": "/docs",
    }
