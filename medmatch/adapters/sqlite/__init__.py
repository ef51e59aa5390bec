"""
SQLite Adapter - Account persistence via aiosqlite.
"""

from .repository import AccountRepository

__all__ = ["AccountRepository"]
