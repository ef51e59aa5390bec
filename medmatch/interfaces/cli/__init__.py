"""
CLI Interface - Command-line tools for Medmatch.

Provides commands for:
- Database initialization
- Account creation
- Running the API server
"""

from .main import app, main

__all__ = ["app", "main"]
