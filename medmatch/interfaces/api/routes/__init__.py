"""
API Routes.
"""

from . import accounts, health

__all__ = ["health", "accounts"]
