"""
API Interface - FastAPI REST API.

Mounts the accounts/authentication routes consumed by the Medmatch frontend.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
