"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    AccountConflictError,
    AccountNotFoundError,
    ConflictError,
    ErrorCode,
    MedmatchError,
    NotFoundError,
    RequestValidationFailed,
    StorageError,
    UnauthorizedError,
    validation_entry,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "MedmatchError",
    "UnauthorizedError",
    "NotFoundError",
    "ConflictError",
    "AccountNotFoundError",
    "AccountConflictError",
    "StorageError",
    "RequestValidationFailed",
    "validation_entry",
]
