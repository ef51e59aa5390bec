"""
Adapters - External service integrations.

All storage access is wrapped here to isolate domains from third-party changes.
"""

from .sqlite import AccountRepository

__all__ = ["AccountRepository"]
